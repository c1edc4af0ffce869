# =====================================
# securetrack/main.py
# =====================================
from datetime import date
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from . import budgets, customers, events, filters, reports
from .address_lookup import AddressLookup
from .constants import EQUIPMENT_CATALOG, BUDGET_PAYMENT_OPTIONS
from .database import get_db, get_db_sync, init_db
from .exceptions import SecureTrackError, NotFoundError
from .insights import BusinessInsights
from .messaging import WhatsAppHandler, send_budget_email
from .models import BudgetStatus, EventType, EventSeverity
from .scheduler import SyncIndicator
from .schemas import (
    CustomerIn, CustomerUpdate, PaymentStatusIn, NoteIn, ServiceIn, ServiceStatusIn,
    EquipmentIn, EquipmentUpdate, BudgetIn, BudgetUpdate, BudgetStatusIn, EventIn,
    CustomerOut, NoteOut, ServiceOut, EquipmentOut, BudgetOut, EventOut,
)
from .seed import seed_demo_data

# Configuration
load_dotenv()
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize FastAPI
app = FastAPI(
    title="SecureTrack Pro",
    description="Gestão de clientes, contratos e orçamentos de monitoramento de alarmes",
    version="1.0.0"
)

# Initialize services
whatsapp_handler = WhatsAppHandler()
address_lookup = AddressLookup()
business_insights = BusinessInsights()
sync_indicator = SyncIndicator()

MUTATING_METHODS = {"POST", "PUT", "DELETE"}


@app.on_event("startup")
async def startup_event():
    init_db()
    if os.getenv("SEED_DEMO_DATA", "true").lower() == "true":
        db = get_db_sync()
        try:
            seed_demo_data(db)
        finally:
            db.close()
    logger.info("Application démarrée - état mémoire initialisé")


@app.middleware("http")
async def mark_sync(request: Request, call_next):
    """Affiche brièvement l'indicateur de synchronisation après chaque modification"""
    response = await call_next(request)
    if request.method in MUTATING_METHODS and response.status_code < 400:
        sync_indicator.mark_mutation()
    return response


@app.exception_handler(SecureTrackError)
async def business_error_handler(request: Request, exc: SecureTrackError):
    status_code = 404 if isinstance(exc, NotFoundError) else 400
    logger.warning(f"{request.method} {request.url.path} refusé: {exc.message}")
    return JSONResponse({"detail": exc.message}, status_code=status_code)


def _choice(enum_cls, value: str):
    """Valeur de filtre : "all" ou une valeur de l'énumération"""
    if value == filters.ALL:
        return filters.ALL
    try:
        return enum_cls(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Filtro inválido: {value}")


def _budget_out(budget) -> BudgetOut:
    return BudgetOut.model_validate(budget).model_copy(update={
        "display_status": budgets.display_status(budget),
        "expiring_soon": budgets.is_expiring_soon(budget),
    })


# -------------------------------------------------------------------
# Accueil / santé
# -------------------------------------------------------------------

@app.get("/")
async def home():
    return JSONResponse({
        "message": "SecureTrack Pro - API operacional",
        "status": "ativo",
        "service": "securetrack"
    })


@app.get("/health")
async def health_check():
    return JSONResponse({
        "status": "healthy",
        "service": "securetrack",
        "message": "Serviço operacional"
    })


@app.head("/health")
async def health_head():
    return PlainTextResponse("", status_code=200)


# -------------------------------------------------------------------
# Tableau de bord et rapports
# -------------------------------------------------------------------

@app.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    all_customers = customers.list_customers(db)
    return {
        "stats": reports.dashboard_stats(all_customers),
        "service_mix": reports.service_mix(all_customers),
        "sync": sync_indicator.status(),
    }


@app.get("/reports/warranties")
def warranties(limit: int = Query(5, ge=0), db: Session = Depends(get_db)):
    return [
        {"equipment": EquipmentOut.model_validate(equipment), "owner": owner}
        for equipment, owner in reports.warranty_report(customers.list_customers(db), limit=limit)
    ]


@app.get("/reports/service-mix")
def service_mix(db: Session = Depends(get_db)):
    return reports.service_mix(customers.list_customers(db))


@app.post("/analytics/insights")
def generate_insights(db: Session = Depends(get_db)):
    return {"insights": business_insights.generate(customers.list_customers(db))}


@app.get("/catalog")
def catalog():
    return {"equipments": EQUIPMENT_CATALOG, "payment_options": BUDGET_PAYMENT_OPTIONS}


@app.get("/address/{zip_code}")
def lookup_address(zip_code: str):
    result = address_lookup.lookup(zip_code)
    if result is None:
        raise HTTPException(status_code=404, detail="CEP não encontrado")
    return result


# -------------------------------------------------------------------
# Clients
# -------------------------------------------------------------------

@app.get("/customers", response_model=list[CustomerOut])
def list_customers(q: str = "", contract: str = filters.CONTRACT_ALL, db: Session = Depends(get_db)):
    if contract not in filters.CONTRACT_FILTERS:
        raise HTTPException(status_code=400, detail=f"Filtro inválido: {contract}")
    return filters.filter_customers(customers.list_customers(db), q, contract)


@app.post("/customers", response_model=CustomerOut, status_code=201)
def create_customer(payload: CustomerIn, db: Session = Depends(get_db)):
    return customers.create_customer(db, **payload.model_dump())


@app.get("/customers/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return customers.get_customer(db, customer_id)


@app.put("/customers/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    return customers.update_customer(db, customer_id, **payload.model_dump(exclude_unset=True))


@app.put("/customers/{customer_id}/payment-status")
def change_payment_status(customer_id: int, payload: PaymentStatusIn, db: Session = Depends(get_db)):
    note = customers.change_payment_status(db, customer_id, payload.status)
    return {
        "customer": CustomerOut.model_validate(customers.get_customer(db, customer_id)),
        "note": NoteOut.model_validate(note) if note else None,
    }


@app.post("/customers/{customer_id}/notes", response_model=NoteOut, status_code=201)
def add_note(customer_id: int, payload: NoteIn, db: Session = Depends(get_db)):
    return customers.add_note(db, customer_id, payload.text)


@app.delete("/customers/{customer_id}/notes/{note_id}", status_code=204)
def delete_note(customer_id: int, note_id: int, db: Session = Depends(get_db)):
    customers.delete_note(db, customer_id, note_id)


@app.post("/customers/{customer_id}/services", response_model=ServiceOut, status_code=201)
def add_service(customer_id: int, payload: ServiceIn, db: Session = Depends(get_db)):
    return customers.add_service(db, customer_id, **payload.model_dump())


@app.post("/customers/{customer_id}/services/{service_id}/approve", response_model=ServiceOut)
def approve_service(customer_id: int, service_id: int, db: Session = Depends(get_db)):
    return customers.approve_service(db, customer_id, service_id)


@app.put("/customers/{customer_id}/services/{service_id}/status", response_model=ServiceOut)
def set_service_status(customer_id: int, service_id: int, payload: ServiceStatusIn,
                       db: Session = Depends(get_db)):
    return customers.set_service_status(db, customer_id, service_id, payload.status)


@app.post("/customers/{customer_id}/services/{service_id}/delete-request", response_model=ServiceOut)
def request_service_deletion(customer_id: int, service_id: int, db: Session = Depends(get_db)):
    return customers.request_service_deletion(db, customer_id, service_id)


@app.post("/customers/{customer_id}/services/{service_id}/delete-cancel", response_model=ServiceOut)
def cancel_service_deletion(customer_id: int, service_id: int, db: Session = Depends(get_db)):
    return customers.cancel_service_deletion(db, customer_id, service_id)


@app.delete("/customers/{customer_id}/services/{service_id}", status_code=204)
def confirm_service_deletion(customer_id: int, service_id: int, db: Session = Depends(get_db)):
    customers.confirm_service_deletion(db, customer_id, service_id)


@app.post("/customers/{customer_id}/equipments", response_model=EquipmentOut, status_code=201)
def add_equipment(customer_id: int, payload: EquipmentIn, db: Session = Depends(get_db)):
    data = payload.model_dump()
    catalog_index = data.pop("catalog_index")
    if catalog_index is not None:
        for field in ("name", "brand", "model"):
            data.pop(field)
        return customers.add_catalog_equipment(db, customer_id, catalog_index, **data)
    return customers.add_equipment(db, customer_id, **data)


@app.put("/customers/{customer_id}/equipments/{equipment_id}", response_model=EquipmentOut)
def update_equipment(customer_id: int, equipment_id: int, payload: EquipmentUpdate,
                     db: Session = Depends(get_db)):
    return customers.update_equipment(db, customer_id, equipment_id, **payload.model_dump(exclude_unset=True))


@app.delete("/customers/{customer_id}/equipments/{equipment_id}", status_code=204)
def delete_equipment(customer_id: int, equipment_id: int, db: Session = Depends(get_db)):
    customers.delete_equipment(db, customer_id, equipment_id)


# -------------------------------------------------------------------
# Orçamentos
# -------------------------------------------------------------------

@app.get("/budgets")
def list_budgets(q: str = "", status: str = filters.ALL, start: Optional[date] = None,
                 end: Optional[date] = None, db: Session = Depends(get_db)):
    selected = filters.filter_budgets(
        budgets.list_budgets(db), q, _choice(BudgetStatus, status), start, end
    )
    return {
        "budgets": [_budget_out(b) for b in selected],
        "report": reports.budget_report(selected),
    }


@app.post("/budgets", response_model=BudgetOut, status_code=201)
def create_budget(payload: BudgetIn, db: Session = Depends(get_db)):
    return _budget_out(budgets.create_budget(db, **payload.model_dump()))


@app.get("/budgets/{budget_id}", response_model=BudgetOut)
def get_budget(budget_id: int, db: Session = Depends(get_db)):
    return _budget_out(budgets.get_budget(db, budget_id))


@app.put("/budgets/{budget_id}", response_model=BudgetOut)
def update_budget(budget_id: int, payload: BudgetUpdate, db: Session = Depends(get_db)):
    return _budget_out(budgets.update_budget(db, budget_id, **payload.model_dump(exclude_unset=True)))


@app.put("/budgets/{budget_id}/status", response_model=BudgetOut)
def set_budget_status(budget_id: int, payload: BudgetStatusIn, db: Session = Depends(get_db)):
    return _budget_out(budgets.set_budget_status(db, budget_id, payload.status))


@app.post("/budgets/{budget_id}/convert")
def convert_budget(budget_id: int, db: Session = Depends(get_db)):
    service = budgets.convert_budget_to_service(db, budget_id)
    budget = budgets.get_budget(db, budget_id)
    return {
        "message": f"Orçamento {budget.account_number} convertido com sucesso!",
        "customer_id": budget.customer_id,
        "service": ServiceOut.model_validate(service),
        "budget": _budget_out(budget),
    }


@app.get("/budgets/{budget_id}/whatsapp")
def budget_whatsapp_link(budget_id: int, db: Session = Depends(get_db)):
    budget = budgets.get_budget(db, budget_id)
    customer = None
    if budget.customer_id:
        try:
            customer = customers.get_customer(db, budget.customer_id)
        except NotFoundError:
            customer = None
    return {"url": whatsapp_handler.build_budget_link(budget, customer)}


@app.post("/budgets/{budget_id}/email")
def budget_email(budget_id: int, db: Session = Depends(get_db)):
    budget = budgets.get_budget(db, budget_id)
    return {"sent": send_budget_email(budget), "to": budget.customer_email}


# -------------------------------------------------------------------
# Journal
# -------------------------------------------------------------------

@app.get("/events")
def list_events(q: str = "", type: str = filters.ALL, severity: str = filters.ALL,
                start: Optional[date] = None, end: Optional[date] = None,
                db: Session = Depends(get_db)):
    all_events = events.list_events(db)
    selected = filters.filter_events(
        all_events, q, _choice(EventType, type), _choice(EventSeverity, severity), start, end
    )
    return {
        "events": [EventOut.model_validate(e) for e in selected],
        "stats": reports.event_stats(all_events),
    }


@app.post("/events", response_model=EventOut, status_code=201)
def record_event(payload: EventIn, db: Session = Depends(get_db)):
    return events.record_event(db, **payload.model_dump())


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "securetrack.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("DEBUG", "False").lower() == "true"
    )
