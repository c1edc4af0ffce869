from unittest.mock import MagicMock

from securetrack import main


class TestHealth:
    def test_home(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "securetrack"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"
        assert client.head("/health").status_code == 200


class TestDashboard:
    def test_stats_and_mix(self, client):
        data = client.get("/dashboard").json()
        assert data["stats"] == {
            "total_customers": 2,
            "active_services": 1,
            "total_equipments": 3,
            "pending_payments": 1,
        }
        assert data["service_mix"]["Monitoramento"] == 1
        assert set(data["sync"]) == {"syncing", "last_update"}

    def test_warranties(self, client):
        rows = client.get("/reports/warranties").json()
        assert [r["owner"] for r in rows] == ["João Silva", "João Silva", "Maria Oliveira"]

    def test_service_mix(self, client):
        mix = client.get("/reports/service-mix").json()
        assert mix["Manutenção"] == 1
        assert mix["Venda"] == 0

    def test_catalog(self, client):
        data = client.get("/catalog").json()
        assert len(data["equipments"]) == 6
        assert data["payment_options"][0] == "Pix à vista (5% desc.)"

    def test_insights_without_key(self, client, monkeypatch):
        monkeypatch.setattr(main.business_insights, "client", None)
        response = client.post("/analytics/insights")
        assert response.status_code == 200
        assert response.json()["insights"] == "Não foi possível gerar insights no momento."

    def test_address_not_found(self, client, monkeypatch):
        monkeypatch.setattr(main.address_lookup, "lookup", MagicMock(return_value=None))
        assert client.get("/address/00000000").status_code == 404


class TestCustomersApi:
    def test_list_and_filter(self, client):
        assert len(client.get("/customers").json()) == 2
        names = [c["name"] for c in client.get("/customers", params={"q": "oliveira"}).json()]
        assert names == ["Maria Oliveira"]
        assert client.get("/customers", params={"contract": "no-contract"}).json() == []
        assert client.get("/customers", params={"contract": "xyz"}).status_code == 400

    def test_create_customer(self, client):
        response = client.post("/customers", json={
            "name": "Padaria Central", "phone": "(11) 3333-4444", "email": "padaria@email.com",
            "address": "Rua Augusta, 500", "city": "São Paulo", "state": "SP",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["payment_status"] == "Em dia"
        assert data["address"] == "Rua Augusta, 500, São Paulo - SP"
        assert data["services"] == [] and data["equipments"] == []

    def test_create_without_name(self, client):
        response = client.post("/customers", json={"name": ""})
        assert response.status_code == 400
        assert response.json()["detail"] == "O nome do cliente é obrigatório."

    def test_unknown_customer(self, client):
        assert client.get("/customers/999").status_code == 404

    def test_payment_status_change(self, client):
        response = client.put("/customers/1/payment-status", json={"status": "Em atraso"})
        data = response.json()
        assert data["customer"]["payment_status"] == "Em atraso"
        assert data["note"]["is_system"] is True
        assert data["customer"]["notes"][0]["id"] == data["note"]["id"]

        again = client.put("/customers/1/payment-status", json={"status": "Em atraso"}).json()
        assert again["note"] is None

    def test_system_note_delete_refused(self, client):
        note = client.put("/customers/2/payment-status", json={"status": "Em dia"}).json()["note"]
        response = client.delete(f"/customers/2/notes/{note['id']}")
        assert response.status_code == 400

    def test_service_lifecycle(self, client):
        created = client.post("/customers/2/services", json={
            "type": "Reparo Técnico", "price": 180, "description": "Troca de sirene",
        })
        assert created.status_code == 201
        service = created.json()
        assert service["status"] == "Aguardando Autorização"

        approved = client.post(f"/customers/2/services/{service['id']}/approve").json()
        assert approved["status"] == "Ativo"

        assert client.delete(f"/customers/2/services/{service['id']}").status_code == 400
        client.post(f"/customers/2/services/{service['id']}/delete-request")
        assert client.delete(f"/customers/2/services/{service['id']}").status_code == 204

        services = client.get("/customers/2").json()["services"]
        assert all(s["id"] != service["id"] for s in services)

    def test_missing_technical_description(self, client):
        response = client.post("/customers/2/services", json={"type": "Manutenção", "price": 100})
        assert response.status_code == 400

    def test_catalog_equipment(self, client):
        response = client.post("/customers/2/equipments", json={"catalog_index": 1})
        assert response.status_code == 201
        assert response.json()["model"] == "DX-400"

        equipment_id = response.json()["id"]
        updated = client.put(f"/customers/2/equipments/{equipment_id}", json={"status": "Substituído"})
        assert updated.json()["status"] == "Substituído"
        assert client.delete(f"/customers/2/equipments/{equipment_id}").status_code == 204


class TestBudgetsApi:
    def test_list_with_report(self, client):
        data = client.get("/budgets").json()
        assert [b["account_number"] for b in data["budgets"]] == ["QT-5001", "QT-5002"]
        assert data["report"]["total_value"] == 2450
        assert data["report"]["conversion_rate"] == 50.0

        open_only = client.get("/budgets", params={"status": "Em Aberto"}).json()
        assert open_only["report"]["count"] == 1
        assert client.get("/budgets", params={"status": "Desconhecido"}).status_code == 400

    def test_create_budget(self, client):
        response = client.post("/budgets", json={
            "customer_name": "Condomínio Verde",
            "customer_email": "sindico@verde.com",
            "items": [
                {"description": "Câmera IP", "quantity": "4", "unit_price": "280"},
                {"description": "Instalação", "quantity": 1, "unit_price": "abc"},
            ],
            "discount": 20,
        })
        assert response.status_code == 201
        data = response.json()
        assert data["subtotal"] == 1120
        assert data["total"] == 1100
        assert data["display_status"] == "Em Aberto"
        assert data["items"][1]["total"] == 0

    def test_create_without_items(self, client):
        response = client.post("/budgets", json={"customer_name": "X", "customer_email": "x@x.com", "items": []})
        assert response.status_code == 400
        assert response.json()["detail"] == "Adicione pelo menos um item."

    def test_expired_status_refused(self, client):
        assert client.put("/budgets/2/status", json={"status": "Expirado"}).status_code == 400

    def test_convert(self, client):
        response = client.post("/budgets/1/convert")
        assert response.status_code == 200
        data = response.json()
        assert data["customer_id"] == 1
        assert data["service"]["type"] == "Instalação"
        assert data["service"]["status"] == "Pendente"
        assert data["budget"]["status"] == "Aceito"

        services = client.get("/customers/1").json()["services"]
        assert services[0]["id"] == data["service"]["id"]

    def test_convert_unlinked(self, client):
        response = client.post("/budgets/2/convert")
        assert response.status_code == 400
        assert response.json()["detail"] == "Para converter, vincule este orçamento a um cliente cadastrado."

    def test_whatsapp_and_email(self, client):
        url = client.get("/budgets/1/whatsapp").json()["url"]
        assert url.startswith("https://wa.me/11999998888?text=")
        assert client.post("/budgets/2/email").json() == {"sent": True, "to": "contato@solar.com"}


class TestEventsApi:
    def test_list_and_stats(self, client):
        data = client.get("/events").json()
        assert len(data["events"]) == 5
        assert data["stats"] == {"critical": 1, "warnings": 1, "total": 5}

        critical = client.get("/events", params={"severity": "Crítico"}).json()
        assert len(critical["events"]) == 1
        assert critical["stats"]["total"] == 5

    def test_record_event(self, client):
        response = client.post("/events", json={
            "type": "Sistema", "description": "Backup concluído", "user": "Sistema",
        })
        assert response.status_code == 201
        assert response.json()["status"] == "Informativo"
        assert client.get("/events").json()["events"][0]["description"] == "Backup concluído"

    def test_invalid_filter(self, client):
        assert client.get("/events", params={"type": "nope"}).status_code == 400


class TestRequestEdgeCases:
    def test_null_discount_keeps_stored_discount(self, client):
        created = client.post("/budgets", json={
            "customer_name": "Mercado Bom Preço",
            "customer_email": "compras@bompreco.com",
            "items": [{"description": "Painel de Alarme", "quantity": 1, "unit_price": 450}],
            "discount": 50,
        }).json()

        updated = client.put(f"/budgets/{created['id']}", json={"discount": None, "notes": "Retornar sexta"})
        assert updated.status_code == 200
        assert updated.json()["discount"] == 50
        assert updated.json()["total"] == 400
        assert updated.json()["notes"] == "Retornar sexta"

    def test_negative_warranty_limit_refused(self, client):
        assert client.get("/reports/warranties", params={"limit": -1}).status_code == 422
        assert client.get("/reports/warranties", params={"limit": 0}).json() == []
