"""
SecureTrack Exceptions

Erreurs métier levées par les opérations du tableau de bord.
Le message est destiné à l'utilisateur final.
"""

from typing import Optional


class SecureTrackError(Exception):
    """Base des erreurs métier"""

    def __init__(self, message: str, target_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.target_id = target_id


class ValidationError(SecureTrackError):
    """Formulaire invalide ou transition refusée"""
    pass


class NotFoundError(SecureTrackError):
    """Client, orçamento ou élément introuvable"""
    pass


class ConversionError(SecureTrackError):
    """Conversion d'un orçamento impossible (client non lié ou absent)"""
    pass
