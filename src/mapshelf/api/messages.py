"""
Localized messages for API error codes.

Unknown codes (and values without a code) resolve to the INTERNAL_ERROR
message of the requested locale; unknown locales resolve to the default one.
"""

from __future__ import annotations

from typing import Any

from mapshelf.api.errors import get_error_code
from mapshelf.config import get_settings

FALLBACK_CODE = "INTERNAL_ERROR"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "INTERNAL_ERROR": "Something went wrong. Please try again later.",
        "VALIDATION_ERROR": "Some fields are invalid.",
        "UNAUTHORIZED": "You need to be signed in.",
        "RATE_LIMIT_EXCEEDED": "Too many attempts. Please wait a moment.",
        "INVALID_CREDENTIALS": "Invalid email or password.",
        "EMAIL_IN_USE": "This email is already in use.",
        "EMAIL_NOT_VERIFIED": "Please verify your email before logging in.",
        "EMAIL_ALREADY_VERIFIED": "This email is already verified.",
        "EMAIL_REQUIRED": "Email is required.",
        "EMAIL_TOO_LONG": "Email is too long.",
        "INVALID_EMAIL": "Please enter a valid email address.",
        "PASSWORD_REQUIRED": "Password is required.",
        "PASSWORD_TOO_SHORT": "Password must be at least 8 characters.",
        "PASSWORD_TOO_LONG": "Password is too long.",
        "PASSWORD_SAME": "The new password must differ from the current one.",
        "TOKEN_REQUIRED": "The link is missing its token.",
        "TOKEN_EXPIRED": "This link is invalid or has expired.",
        "INVALID_REFRESH_TOKEN": "Your session has expired. Please sign in again.",
        "REFRESH_TOKEN_REQUIRED": "Your session has expired. Please sign in again.",
        "NAME_TOO_LONG": "Name is too long.",
        "BIO_TOO_LONG": "Bio is too long.",
        "INVALID_URL": "Please enter a valid URL.",
    },
    "fr": {
        "INTERNAL_ERROR": "Une erreur est survenue. Veuillez réessayer plus tard.",
        "VALIDATION_ERROR": "Certains champs sont invalides.",
        "UNAUTHORIZED": "Vous devez être connecté.",
        "RATE_LIMIT_EXCEEDED": "Trop de tentatives. Veuillez patienter.",
        "INVALID_CREDENTIALS": "Email ou mot de passe incorrect.",
        "EMAIL_IN_USE": "Cet email est déjà utilisé.",
        "EMAIL_NOT_VERIFIED": "Veuillez vérifier votre email avant de vous connecter.",
        "EMAIL_ALREADY_VERIFIED": "Cet email est déjà vérifié.",
        "EMAIL_REQUIRED": "L'email est requis.",
        "EMAIL_TOO_LONG": "L'email est trop long.",
        "INVALID_EMAIL": "Veuillez saisir une adresse email valide.",
        "PASSWORD_REQUIRED": "Le mot de passe est requis.",
        "PASSWORD_TOO_SHORT": "Le mot de passe doit contenir au moins 8 caractères.",
        "PASSWORD_TOO_LONG": "Le mot de passe est trop long.",
        "PASSWORD_SAME": "Le nouveau mot de passe doit être différent de l'actuel.",
        "TOKEN_REQUIRED": "Le lien ne contient pas de jeton.",
        "TOKEN_EXPIRED": "Ce lien est invalide ou a expiré.",
        "INVALID_REFRESH_TOKEN": "Votre session a expiré. Veuillez vous reconnecter.",
        "REFRESH_TOKEN_REQUIRED": "Votre session a expiré. Veuillez vous reconnecter.",
        "NAME_TOO_LONG": "Le nom est trop long.",
        "BIO_TOO_LONG": "La bio est trop longue.",
        "INVALID_URL": "Veuillez saisir une URL valide.",
    },
}


def _catalog(locale: str | None) -> dict[str, str]:
    lang = str(locale or "").strip().lower().split("-", 1)[0]
    if lang in MESSAGES:
        return MESSAGES[lang]
    return MESSAGES.get(get_settings().default_language.strip().lower(), MESSAGES["en"])


def has_message(code: str | None, locale: str | None = None) -> bool:
    return bool(code) and code in _catalog(locale)


def error_message(error: Any, locale: str | None = None) -> str:
    catalog = _catalog(locale)
    code = get_error_code(error)
    if code and code in catalog:
        return catalog[code]
    return catalog[FALLBACK_CODE]
