"""Language Strings — centralized locale-specific text shown to end users.

Invariants:
    - All strings are pure data (no IO, no computation beyond formatting)
    - Every error code has an entry for every Locale
    - Placeholders are named ({limit}) and always supplied by get_error_message

Design Decisions:
    - Keyed by error code, not by exception class: the REST envelope only knows the code
    - Unknown codes fall back to INTERNAL_ERROR text: never echo internal messages
    - Informal French register ("tu") matches the product's student audience
"""

from app.core.domain_types import Locale


_ERROR_MESSAGES: dict[str, dict[Locale, str]] = {
    "UNAUTHENTICATED": {
        Locale.FR: "Authentification requise. Reconnecte-toi.",
        Locale.EN: "Authentication required. Please sign in again.",
    },
    "VALIDATION_ERROR": {
        Locale.FR: "Champs requis manquants ou invalides.",
        Locale.EN: "Missing or invalid required fields.",
    },
    "INVALID_KEY_INPUT": {
        Locale.FR: "Clé invalide.",
        Locale.EN: "Invalid key.",
    },
    "QUOTA_EXCEEDED": {
        Locale.FR: (
            "Limite de {limit} fiches par jour atteinte. "
            "Passe en Premium pour des fiches illimitées !"
        ),
        Locale.EN: (
            "Daily limit of {limit} sheets reached. "
            "Upgrade to Premium for unlimited sheets!"
        ),
    },
    "PROFILE_NOT_FOUND": {
        Locale.FR: "Profil introuvable.",
        Locale.EN: "Profile not found.",
    },
    "INVALID_CODE": {
        Locale.FR: "Clé VIP invalide.",
        Locale.EN: "Invalid VIP key.",
    },
    "CODE_ALREADY_USED": {
        Locale.FR: "Clé VIP déjà utilisée.",
        Locale.EN: "This VIP key has already been used.",
    },
    "TIER_UPGRADE_FAILED": {
        Locale.FR: (
            "Ta clé a été acceptée mais l'activation VIP a échoué. "
            "Contacte le support."
        ),
        Locale.EN: (
            "Your key was accepted but the VIP upgrade failed. "
            "Please contact support."
        ),
    },
    "UPSTREAM_THROTTLED": {
        Locale.FR: "Trop de requêtes, réessaie dans quelques instants.",
        Locale.EN: "Too many requests, try again in a few moments.",
    },
    "UPSTREAM_EXHAUSTED": {
        Locale.FR: "Service IA temporairement indisponible.",
        Locale.EN: "AI service temporarily unavailable.",
    },
    "UPSTREAM_UNAVAILABLE": {
        Locale.FR: "La génération a échoué. Réessaie dans un instant.",
        Locale.EN: "Generation failed. Please try again shortly.",
    },
    "EMPTY_RESULT": {
        Locale.FR: "L'IA n'a renvoyé aucun contenu. Réessaie.",
        Locale.EN: "The AI returned no content. Please try again.",
    },
    "PERSISTENCE_FAILED": {
        Locale.FR: "Impossible d'enregistrer les fiches générées.",
        Locale.EN: "The generated sheets could not be saved.",
    },
    "DATABASE_ERROR": {
        Locale.FR: "Service momentanément indisponible.",
        Locale.EN: "Service temporarily unavailable.",
    },
    "INTERNAL_ERROR": {
        Locale.FR: "Une erreur inattendue est survenue.",
        Locale.EN: "An unexpected error occurred.",
    },
}


def get_error_message(code: str, locale: Locale, **params: object) -> str:
    """User-facing message for an error code. Pure."""
    messages = _ERROR_MESSAGES.get(code, _ERROR_MESSAGES["INTERNAL_ERROR"])
    template = messages.get(locale, messages[Locale.EN])
    try:
        return template.format(**params)
    except KeyError:
        return _ERROR_MESSAGES["INTERNAL_ERROR"][locale]


def known_error_codes() -> frozenset[str]:
    return frozenset(_ERROR_MESSAGES)
