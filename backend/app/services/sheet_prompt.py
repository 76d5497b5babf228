"""Sheet Prompts — system and user prompts for study-sheet generation.

Invariants:
    - build_user_prompt asks for exactly gen_type.unit_count sheets
    - Multi-sheet prompts require one "## <unit word> N — <title>" heading per sheet,
      the exact shape core/decompose.py splits on
    - Prompts are pure strings (no IO)

Design Decisions:
    - One dict per locale instead of a translation layer: two languages, short texts
    - Chapter requests are worded as a chapter of 3 sheets, not "3 sheets":
      the provider covers complementary aspects instead of repeating itself
    - XML-free plain Markdown instructions: the output is Markdown too
"""

from app.core.domain_types import GenType, Locale


UNIT_WORD: dict[Locale, str] = {
    Locale.FR: "Fiche",
    Locale.EN: "Sheet",
}

_SYSTEM_PROMPT: dict[Locale, str] = {
    Locale.FR: (
        "Tu es un expert en éducation française. Tu crées des fiches de "
        "révision claires, structurées et pédagogiques pour les lycéens.\n"
        "Chaque fiche doit contenir:\n"
        "- Un titre clair\n"
        "- Les points clés à retenir (avec des bullet points)\n"
        "- Des définitions importantes\n"
        "- Des exemples concrets\n"
        "- Un résumé en 2-3 phrases\n\n"
        "Format: Utilise du Markdown pour structurer le contenu.\n"
        "Langue: Français uniquement."
    ),
    Locale.EN: (
        "You are an education expert. You write clear, structured and "
        "teaching-oriented revision sheets for high-school students.\n"
        "Each sheet must contain:\n"
        "- A clear title\n"
        "- The key points to remember (as bullet points)\n"
        "- Important definitions\n"
        "- Concrete examples\n"
        "- A 2-3 sentence summary\n\n"
        "Format: Use Markdown to structure the content.\n"
        "Language: English only."
    ),
}

_CHAPTER_REQUEST: dict[Locale, str] = {
    Locale.FR: (
        'Génère un chapitre complet de révision sur "{topic}" en {subject}, '
        "niveau {level}. Inclus {count} fiches couvrant les aspects "
        "principaux du sujet."
    ),
    Locale.EN: (
        'Write a complete revision chapter on "{topic}" in {subject}, '
        "level {level}. Include {count} sheets covering the main aspects "
        "of the topic."
    ),
}

_SHEETS_REQUEST: dict[Locale, str] = {
    Locale.FR: (
        'Génère {count} fiche(s) de révision sur "{topic}" en {subject}, '
        "niveau {level}."
    ),
    Locale.EN: (
        'Write {count} revision sheet(s) on "{topic}" in {subject}, '
        "level {level}."
    ),
}

_DISTINCT_ASPECTS: dict[Locale, str] = {
    Locale.FR: " Chaque fiche doit couvrir un aspect différent du sujet.",
    Locale.EN: " Each sheet must cover a different aspect of the topic.",
}

_HEADING_RULE: dict[Locale, str] = {
    Locale.FR: (
        "\n\nCommence chaque fiche par un titre de niveau 2 exactement de la "
        'forme "## {word} N — Titre de la fiche" (N de 1 à {count}), '
        "sans texte avant la première fiche."
    ),
    Locale.EN: (
        "\n\nStart every sheet with a level-2 heading of exactly the form "
        '"## {word} N — Sheet title" (N from 1 to {count}), '
        "with no text before the first sheet."
    ),
}


def build_system_prompt(locale: Locale = Locale.FR) -> str:
    return _SYSTEM_PROMPT[locale]


def build_user_prompt(
    locale: Locale, subject: str, level: str, topic: str, gen_type: GenType,
) -> str:
    """User message for one generation request."""
    count = gen_type.unit_count
    template = (
        _CHAPTER_REQUEST if gen_type is GenType.CHAPTER else _SHEETS_REQUEST
    )[locale]
    prompt = template.format(
        topic=topic, subject=subject, level=level, count=count,
    )
    if count > 1:
        if gen_type is not GenType.CHAPTER:
            prompt += _DISTINCT_ASPECTS[locale]
        prompt += _HEADING_RULE[locale].format(
            word=UNIT_WORD[locale], count=count,
        )
    return prompt
