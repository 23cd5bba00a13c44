from clinic_dashboard.domain.conversations.classifier import (
    SERVICE_KEYWORDS,
    detect_services,
    has_scheduling_link,
)


def test_detect_services_is_case_insensitive():
    assert set(detect_services("Quiero información sobre BOTOX y rellenos")) == {"Botox", "Rellenos"}


def test_detect_services_emits_each_label_once_in_table_order():
    text = "tirzepatide, mounjaro o bajar de peso? también botox y más bótox"
    assert detect_services(text) == ["Botox", "Tirzepatide"]


def test_detect_services_matches_misspellings_and_synonyms():
    assert detect_services("me interesa la genecologia") == ["Ginecología"]
    assert detect_services("busco algo para la perdida de peso") == ["Tirzepatide"]


def test_detect_services_keeps_substring_false_positives():
    # "nad" is a Sueroterapia keyword and matches inside "nada"
    assert "Sueroterapia" in detect_services("no quiero nada, gracias")


def test_consulta_general_needs_explicit_phrase():
    assert detect_services("hola, buenas tardes") == []
    assert detect_services("quisiera una consulta general") == ["Consulta General"]


def test_detect_services_empty_text():
    assert detect_services("") == []
    assert detect_services(None) == []


def test_dictionary_has_fifteen_labels_with_lowercase_keywords():
    assert len(SERVICE_KEYWORDS) == 15
    for keywords in SERVICE_KEYWORDS.values():
        assert all(keyword == keyword.lower() for keyword in keywords)


def test_has_scheduling_link():
    assert has_scheduling_link("Reserva en https://cal.com/clinica/consulta")
    assert not has_scheduling_link("Te llamamos mañana")
    assert not has_scheduling_link("")
    assert has_scheduling_link("book at calendly.com/x", marker="calendly.com/")
