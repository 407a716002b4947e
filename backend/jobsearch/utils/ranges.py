# INSEE "tranche d'effectif salarié" codes -> (min, max) headcount.
HEADCOUNT_RANGES: dict[str, tuple[int | None, int | None]] = {
    "NN": (None, None),
    "00": (0, 0),
    "01": (1, 2),
    "02": (3, 5),
    "03": (6, 9),
    "11": (10, 19),
    "12": (20, 49),
    "21": (50, 99),
    "22": (100, 199),
    "31": (200, 249),
    "32": (250, 499),
    "41": (500, 999),
    "42": (1000, 1999),
    "51": (2000, 4999),
    "52": (5000, 9999),
    "53": (10000, None),
}

NAF_LABELS: dict[str, str] = {
    "62.01Z": "Programmation informatique",
    "62.02A": "Conseil systèmes informatiques",
    "62.02B": "Tierce maintenance informatique",
    "62.03Z": "Gestion installations informatiques",
    "62.09Z": "Autres activités informatiques",
    "63.11Z": "Traitement de données",
    "63.12Z": "Portails Internet",
}


def headcount_bounds(code: str | None) -> tuple[int | None, int | None]:
    """Convert a headcount range code to (min, max); unknown codes give (None, None)."""
    if code is None:
        return None, None
    return HEADCOUNT_RANGES.get(code, (None, None))


def naf_label(code: str) -> str:
    return NAF_LABELS.get(code, "Informatique")


def format_revenue(amount: int) -> str:
    """Convert a revenue in euros to a human-scale label."""
    if amount >= 1_000_000_000:
        return f"{amount / 1_000_000_000:.1f} Md€"
    elif amount >= 1_000_000:
        return f"{amount / 1_000_000:.1f} M€"
    elif amount >= 1_000:
        return f"{amount // 1_000} k€"
    else:
        return f"{amount} €"


def format_amount(amount: int) -> str:
    """Short integer form used in search summaries (1M€, 500k€, 800€)."""
    if amount >= 1_000_000:
        return f"{amount // 1_000_000}M€"
    elif amount >= 1_000:
        return f"{amount // 1_000}k€"
    else:
        return f"{amount}€"
