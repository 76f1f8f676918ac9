"""
Encodage / décodage du jeton de session posé dans le cookie `session-token`.

Format : base64("<userId>:<issuedAtMillis>").

Attention : le jeton n'est ni chiffré ni signé. Quiconque possède la chaîne
(ou sait la fabriquer à partir d'un id utilisateur) est authentifié, et
issued_at n'est pas utilisé pour l'expiration : seule la durée de vie du
cookie côté navigateur limite la session. Le format est conservé tel quel
pour rester compatible avec les cookies déjà émis ; le remplacer par un
jeton signé ou une table de sessions est une décision à prendre explicitement.
"""

import base64
import binascii
import time
from typing import Optional, Tuple

from app.errors import MalformedTokenError

DELIMITER = ":"
# Un timestamp en millisecondes tient sur 19 chiffres (int64)
MAX_TIMESTAMP_DIGITS = 19


def now_millis() -> int:
    return int(time.time() * 1000)


def encode_session_token(user_id: str, issued_at_ms: int) -> str:
    """Encode (user_id, issued_at_ms) en une chaîne transportable dans un cookie."""
    raw = f"{user_id}{DELIMITER}{issued_at_ms}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def issue_session_token(user_id: str, issued_at_ms: Optional[int] = None) -> str:
    """Crée un jeton daté de maintenant (ou de issued_at_ms si fourni)."""
    if issued_at_ms is None:
        issued_at_ms = now_millis()
    return encode_session_token(str(user_id), issued_at_ms)


def decode_session_token(token: str) -> Tuple[str, int]:
    """
    Décode un jeton en (user_id, issued_at_ms).
    Lève MalformedTokenError pour toute chaîne qui n'a pas été produite par
    encode_session_token ; aucune autre exception ne sort de cette fonction.
    """
    if not isinstance(token, str) or not token:
        raise MalformedTokenError("Jeton de session vide.")

    try:
        raw = base64.b64decode(token.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise MalformedTokenError("Jeton de session illisible.") from exc

    # Le timestamp ne contient jamais le délimiteur : on coupe sur le dernier.
    user_id, sep, issued_at = raw.rpartition(DELIMITER)
    if not sep or not user_id:
        raise MalformedTokenError("Jeton de session sans identifiant utilisateur.")
    if not (issued_at.isascii() and issued_at.isdigit()) or len(issued_at) > MAX_TIMESTAMP_DIGITS:
        raise MalformedTokenError("Horodatage du jeton de session invalide.")

    try:
        return user_id, int(issued_at)
    except ValueError as exc:
        raise MalformedTokenError("Horodatage du jeton de session invalide.") from exc
