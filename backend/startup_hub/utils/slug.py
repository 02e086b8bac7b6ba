import re
import unicodedata

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """
    Turn a startup name into its URL identifier.

    "Café Ñú S.L." -> "cafe-nu-s-l". Deterministic; uniqueness is enforced
    when the slug is written (see services.moderation).
    """
    decomposed = unicodedata.normalize("NFD", name.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALPHANUMERIC.sub("-", stripped).strip("-")
