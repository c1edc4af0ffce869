# =====================================
# securetrack/insights.py
# =====================================
import os
import json
import logging
from typing import Iterable, List

from dotenv import load_dotenv
from openai import OpenAI

from .models import Customer

load_dotenv()

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Erro ao gerar insights automáticos."
UNAVAILABLE_MESSAGE = "Não foi possível gerar insights no momento."


def summarize_customers(customers: Iterable[Customer]) -> List[dict]:
    """Résumé compact envoyé au modèle"""
    return [
        {
            "name": c.name,
            "services": [s.type.value for s in c.services],
            "equipmentCount": len(c.equipments),
            "status": c.services[0].status.value if c.services else "N/A",
        }
        for c in customers
    ]


class BusinessInsights:
    def __init__(self):
        self.openai_api_key = os.getenv("OPENAI_API_KEY")
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.client = OpenAI(api_key=self.openai_api_key) if self.openai_api_key else None
        if not self.client:
            logger.warning("Clé API OpenAI non configurée")

    def build_prompt(self, customers: Iterable[Customer]) -> str:
        summary = json.dumps(summarize_customers(customers), ensure_ascii=False)
        return f"""Analise os seguintes dados de uma empresa de monitoramento de alarmes:
{summary}

Por favor, forneça um breve relatório (máximo 200 palavras) em Português sobre:
1. Desempenho geral da carteira.
2. Sugestão de ação imediata (vendas ou manutenção).
3. Tendência observada.
"""

    def generate(self, customers: Iterable[Customer]) -> str:
        """Rapport libre sur la base clients ; jamais d'exception vers l'appelant"""
        if not self.client:
            return UNAVAILABLE_MESSAGE

        prompt = self.build_prompt(customers)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=400,
                temperature=0.7
            )
            content = response.choices[0].message.content
            return content.strip() if content else UNAVAILABLE_MESSAGE
        except Exception as e:
            logger.error(f"Erreur OpenAI: {str(e)}")
            return FALLBACK_MESSAGE
