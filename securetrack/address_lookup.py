# =====================================
# securetrack/address_lookup.py
# =====================================
import os
import re
import logging
from typing import Optional

import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def clean_zip_code(value: str) -> str:
    return re.sub(r"\D", "", value or "")[:8]


def format_zip_code(value: str) -> str:
    """Masque de saisie CEP : 01310-100"""
    digits = clean_zip_code(value)
    if len(digits) > 5:
        return f"{digits[:5]}-{digits[5:]}"
    return digits


class AddressLookup:
    """Recherche d'adresse par CEP (ViaCEP)"""

    def __init__(self):
        self.base_url = os.getenv("VIACEP_BASE_URL", "https://viacep.com.br/ws").rstrip("/")
        self.timeout = 10

    def lookup(self, zip_code: str) -> Optional[dict]:
        """Retourne rue/quartier/ville/UF, ou None si le CEP est incomplet ou introuvable"""
        cep = clean_zip_code(zip_code)
        if len(cep) != 8:
            return None

        url = f"{self.base_url}/{cep}/json/"
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"Erro ao buscar CEP {cep}: {str(e)}")
            return None
        except ValueError:
            logger.error(f"Resposta inválida para o CEP {cep}")
            return None

        if data.get("erro"):
            logger.info(f"CEP {cep} não encontrado")
            return None

        street = data.get("logradouro", "")
        neighborhood = data.get("bairro", "")
        return {
            "street": street,
            "neighborhood": neighborhood,
            "city": data.get("localidade", ""),
            "state": data.get("uf", ""),
            "address": f"{street}, {neighborhood}" if neighborhood else street,
        }
