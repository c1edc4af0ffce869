# =====================================
# securetrack/messaging.py
# =====================================
import os
import re
import logging
from typing import Optional
from urllib.parse import quote

from dotenv import load_dotenv

from .models import Budget, Customer

load_dotenv()

logger = logging.getLogger(__name__)


def format_brl(value: float) -> str:
    """1234.5 -> "1.234,50" """
    text = f"{value or 0.0:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def phone_digits(phone: Optional[str]) -> str:
    return re.sub(r"\D", "", phone or "")


class WhatsAppHandler:
    """Liens wa.me pour partager une proposition (aucune réponse attendue)"""

    def __init__(self):
        self.company_name = os.getenv("COMPANY_NAME", "SecureTrack Pro")
        self.base_url = "https://wa.me"

    def build_budget_message(self, budget: Budget) -> str:
        return (
            f"Olá {budget.customer_name}! Segue o resumo do seu orçamento na {self.company_name}:\n\n"
            f"📌 Proposta: {budget.account_number}\n"
            f"💰 Total: R$ {format_brl(budget.total)}\n"
            f"💳 Pagamento: {budget.payment_terms}\n"
            f"📅 Validade: {budget.valid_until.isoformat() if budget.valid_until else ''}\n\n"
            f"Ficamos à disposição para dúvidas!"
        )

    def build_budget_link(self, budget: Budget, customer: Optional[Customer] = None) -> str:
        """Lien profond ; le téléphone vient du client lié, vide pour un prospect"""
        phone = phone_digits(customer.phone) if customer else ""
        link = f"{self.base_url}/{phone}?text={quote(self.build_budget_message(budget), safe='')}"
        logger.info("[WA:link] proposta=%s | to=%s", budget.account_number, phone or "<sem telefone>")
        return link


def send_budget_email(budget: Budget) -> bool:
    """Envoi simulé de la proposition PDF par e-mail"""
    logger.info("[MAIL:send] proposta=%s | to=%s (simulado)", budget.account_number, budget.customer_email)
    return True
