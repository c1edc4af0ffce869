# =====================================
# securetrack/constants.py
# =====================================
from datetime import date, timedelta

from .models import (
    ServiceStatus, ServiceType, EquipmentStatus, PaymentStatus, BudgetStatus,
    EventType, EventSeverity,
)

EQUIPMENT_CATALOG = [
    {"name": "Painel de Alarme", "brand": "Intelbras", "model": "AMT 2018 E", "base_price": 450},
    {"name": "Sensor de Presença", "brand": "JFL", "model": "DX-400", "base_price": 85},
    {"name": "Câmera IP", "brand": "Hikvision", "model": "DS-2CD1023G0E", "base_price": 280},
    {"name": "Sirene de Alta Potência", "brand": "Intelbras", "model": "SIR 1000", "base_price": 45},
    {"name": "Bateria Estacionária", "brand": "Moura", "model": "12V 7Ah", "base_price": 120},
    {"name": "Cerca Elétrica", "brand": "JFL", "model": "ECR-18", "base_price": 350},
]

BUDGET_PAYMENT_OPTIONS = [
    "Pix à vista (5% desc.)",
    "Boleto Bancário - 30 dias",
    "Boleto Bancário - 3x sem juros",
    "Boleto Bancário - 12x (com juros)",
    "Cartão de Crédito - Até 12x",
    "Débito Automático",
    "Entrada (50%) + Saldo 30 dias",
    "Personalizado (Ver notas)",
]

DEFAULT_BUDGET_PAYMENT_TERMS = BUDGET_PAYMENT_OPTIONS[0]
DEFAULT_SERVICE_PAYMENT_METHOD = "Boleto"
BUDGET_VALIDITY_DAYS = 15
EXPIRING_SOON_DAYS = 3
WARRANTY_PREVIEW_LIMIT = 5

# Types de service dont le formulaire exige une description technique
TYPES_WITH_DESCRIPTION = (
    ServiceType.MAINTENANCE,
    ServiceType.SALES,
    ServiceType.INSTALLATION,
    ServiceType.REPAIR,
)


def _d(value: str) -> date:
    return date.fromisoformat(value)


def initial_customers():
    return [
        {
            "account_number": "ACC-1001",
            "name": "João Silva",
            "address": "Av. Paulista, 1000 - São Paulo, SP",
            "phone": "(11) 99999-8888",
            "email": "joao@email.com",
            "created_at": _d("2023-01-15"),
            "payment_status": PaymentStatus.UP_TO_DATE,
            "notes": [
                {"text": "Cliente prefere contato via WhatsApp.", "created_at": _d("2023-01-15")},
                {"text": "Possui cão de guarda no quintal, atentar ao acesso técnico.", "created_at": _d("2023-02-10")},
            ],
            "services": [
                {
                    "type": ServiceType.MONITORING,
                    "start_date": _d("2023-01-15"),
                    "status": ServiceStatus.ACTIVE,
                    "price": 150.00,
                    "payment_method": "Boleto",
                },
            ],
            "equipments": [
                {
                    "name": "Painel de Alarme", "brand": "Intelbras", "model": "AMT 2018 E",
                    "installation_date": _d("2023-01-15"), "warranty_until": _d("2025-01-15"),
                    "status": EquipmentStatus.OPERATIONAL, "is_leased": False,
                },
                {
                    "name": "Sensor de Presença", "brand": "JFL", "model": "DX-400",
                    "installation_date": _d("2023-01-15"), "warranty_until": _d("2024-01-15"),
                    "status": EquipmentStatus.OPERATIONAL, "is_leased": True,
                },
            ],
        },
        {
            "account_number": "ACC-1002",
            "name": "Maria Oliveira",
            "address": "Rua das Flores, 450 - Curitiba, PR",
            "phone": "(41) 98888-7777",
            "email": "maria.o@email.com",
            "created_at": _d("2023-05-20"),
            "payment_status": PaymentStatus.PENDING,
            "notes": [
                {"text": "Solicitou revisão das câmeras para o próximo mês.", "created_at": _d("2023-12-01")},
            ],
            "services": [
                {
                    "type": ServiceType.MAINTENANCE,
                    "start_date": _d("2024-01-10"),
                    "end_date": _d("2024-01-12"),
                    "status": ServiceStatus.FINISHED,
                    "price": 250.00,
                    "payment_method": "Pix",
                },
            ],
            "equipments": [
                {
                    "name": "Câmera IP", "brand": "Hikvision", "model": "DS-2CD1023G0E",
                    "installation_date": _d("2023-05-20"), "warranty_until": _d("2024-05-20"),
                    "status": EquipmentStatus.NEEDS_MAINTENANCE, "is_leased": False,
                },
            ],
        },
    ]


def initial_budgets():
    """Orçamentos de démonstration ; customer_index renvoie à initial_customers()"""
    return [
        {
            "account_number": "QT-5001",
            "customer_name": "Condomínio Solar",
            "customer_email": "contato@solar.com",
            "items": [
                {"description": "Instalação de Sistema de Monitoramento", "quantity": 1, "unit_price": 1200},
                {"description": "Câmera IP Hikvision", "quantity": 4, "unit_price": 280},
            ],
            "discount": 120,
            "payment_terms": "3x no Boleto",
            "valid_until": _d("2025-12-30"),
            "status": BudgetStatus.OPEN,
            "created_at": _d("2023-11-20"),
        },
        {
            "account_number": "QT-5002",
            "customer_name": "João Silva",
            "customer_email": "joao@email.com",
            "customer_index": 0,
            "items": [
                {"description": "Manutenção Preventiva Semestral", "quantity": 1, "unit_price": 250},
            ],
            "discount": 0,
            "payment_terms": "Pix à vista",
            "valid_until": _d("2024-01-15"),
            "status": BudgetStatus.ACCEPTED,
            "created_at": _d("2023-12-05"),
        },
    ]


def initial_events(reference):
    """Événements de démonstration datés relativement à `reference`"""
    return [
        {
            "timestamp": reference,
            "type": EventType.SECURITY_ALERT,
            "description": "Disparo de alarme - Zona 4 (Cozinha)",
            "user": "Sistema Monitoramento",
            "status": EventSeverity.CRITICAL,
            "details": "Alarme acionado no Condomínio Solar às 02:34 AM. Viaturas em deslocamento.",
        },
        {
            "timestamp": reference - timedelta(hours=1),
            "type": EventType.STATUS_CHANGE,
            "description": 'Status financeiro alterado para "Pendente"',
            "user": "Admin SecureTrack",
            "status": EventSeverity.WARNING,
            "details": "Cliente Maria Oliveira teve o status alterado devido a atraso no boleto 456.",
        },
        {
            "timestamp": reference - timedelta(hours=2),
            "type": EventType.EQUIPMENT_MAINTENANCE,
            "description": "Manutenção de Câmera IP concluída",
            "user": "Técnico Roberto",
            "status": EventSeverity.SUCCESS,
            "details": "Substituição de conector RJ45 e realinhamento de lente.",
        },
        {
            "timestamp": reference - timedelta(days=1),
            "type": EventType.CUSTOMER_INTERACTION,
            "description": "Nova proposta comercial enviada via WhatsApp",
            "user": "Vendedor Lucas",
            "status": EventSeverity.INFO,
            "details": "Proposta QT-5003 enviada para o cliente João Silva.",
        },
        {
            "timestamp": reference - timedelta(days=2),
            "type": EventType.DATA_MODIFICATION,
            "description": "Alteração de endereço de cobrança",
            "user": "Admin SecureTrack",
            "status": EventSeverity.SUCCESS,
            "details": "Endereço atualizado conforme solicitação do cliente via ticket #889.",
        },
    ]
