"""
Service classification of free-text chat messages.

A plain lowercase substring match against a fixed keyword table: no
tokenization, stemming or negation. Short keywords ("nad", "peel", "suero")
match inside unrelated words, and the aggregate numbers on the dashboard
depend on exactly that behavior, so keep the table and the matching as is.
"""

from ...config import SCHEDULING_LINK_MARKER

SERVICE_KEYWORDS: dict[str, list[str]] = {
    "Botox": ["botox", "bótox", "toxina botulínica"],
    "Rellenos": ["relleno", "rellenos", "filler", "fillers", "ácido hialurónico"],
    "Morpheus8": ["morpheus", "morpheus8", "morpheus 8"],
    "Morpheus8 V": ["morpheus8 v", "morpheus v", "rejuvenecimiento vaginal", "rejuvenecimiento íntimo"],
    "Sueroterapia": ["sueroterapia", "suero", "terapia intravenosa", "iv therapy", "nad+", "nad"],
    "Tirzepatide": [
        "tirzepatide",
        "mounjaro",
        "zepbound",
        "bajar de peso",
        "perder peso",
        "pérdida de peso",
        "perdida de peso",
        "weight loss",
        "inyecciones para bajar",
    ],
    "Control Prenatal": ["prenatal", "embarazo", "pregnancy", "embarazada", "seguimiento de embarazo"],
    "Ginecología": ["ginecología", "ginecologia", "gynecology", "ginecológico", "genecologia"],
    "Tratamiento Facial": ["facial", "limpieza facial", "hydrafacial", "skin care"],
    "Peeling": ["peeling", "peel", "exfoliación"],
    "Láser": ["láser", "laser", "depilación láser"],
    "Plasma/PRP": ["plasma", "prp", "platelet"],
    "Hilos Tensores": ["hilos", "hilos tensores", "thread lift", "lifting", "hilos sensore"],
    "Implantes Hormonales": ["implantes hormonales", "biote", "pellets", "hormonas"],
    "Consulta General": ["consulta general", "información general", "información sobre servicios"],
}


def detect_services(text: str) -> list[str]:
    """Service labels whose keywords appear in the text, in table order, each once"""
    if not text:
        return []

    lowered = text.lower()
    services = []
    for service, keywords in SERVICE_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            services.append(service)
    return services


def has_scheduling_link(text: str, marker: str = SCHEDULING_LINK_MARKER) -> bool:
    """True if the text contains the scheduling provider's link"""
    if not text:
        return False
    return marker in text
