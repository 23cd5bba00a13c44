from clinic_dashboard.domain.conversations.aggregator import aggregate, build_conversations
from clinic_dashboard.domain.conversations.filters import exclude_test_data, is_excluded
from clinic_dashboard.domain.conversations.schemas import UNKNOWN_NAME, RawMessage

SESSION = "18095550001@s.whatsapp.net"


def human(message_id, text, session=SESSION):
    return RawMessage(id=message_id, sessionId=session, role="human", text=text)


def ai(message_id, text, session=SESSION):
    return RawMessage(id=message_id, sessionId=session, role="ai", text=text)


def test_aggregate_folds_one_conversation_per_session():
    messages = [
        human(1, "Nombre: Ana Lopez\nQuiero botox"),
        ai(2, "Reserva aquí https://cal.com/clinica"),
        human(3, "y también rellenos por favor"),
        human(4, "hola", session="18095550002@s.whatsapp.net"),
    ]

    conversations = aggregate(messages)

    assert set(conversations) == {SESSION, "18095550002@s.whatsapp.net"}
    ana = conversations[SESSION]
    assert ana.phoneNumber == "18095550001"
    assert ana.displayName == "Ana Lopez"
    assert ana.servicesConsulted == ["Botox", "Rellenos"]
    assert ana.linkSent is True
    assert ana.messageCount == 3
    assert ana.lastMessage == "y también rellenos por favor"


def test_display_name_is_never_overwritten_by_unknown():
    messages = [human(1, "Nombre: Ana Lopez\nhola"), human(2, "Nombre: 18095550001\notra vez")]
    assert aggregate(messages)[SESSION].displayName == "Ana Lopez"


def test_later_real_name_replaces_earlier_one():
    messages = [human(1, "Nombre: Ana\nhola"), human(2, "Nombre: Ana Lopez\nhola")]
    assert aggregate(messages)[SESSION].displayName == "Ana Lopez"


def test_link_in_human_message_does_not_count():
    conversation = aggregate([human(1, "mi amiga me pasó https://cal.com/clinica")])[SESSION]
    assert conversation.linkSent is False


def test_services_in_ai_messages_are_ignored():
    conversation = aggregate([ai(1, "Ofrecemos botox, rellenos y láser")])[SESSION]
    assert conversation.servicesConsulted == []
    assert conversation.displayName == UNKNOWN_NAME
    assert conversation.messageCount == 1


def test_unrecognized_roles_only_count():
    messages = [RawMessage(id=1, sessionId=SESSION, role="system", text="Nombre: Bot\nbotox https://cal.com/x")]
    conversation = aggregate(messages)[SESSION]
    assert conversation.messageCount == 1
    assert conversation.displayName == UNKNOWN_NAME
    assert conversation.linkSent is False


def test_last_message_skips_short_texts_and_truncates_long_ones():
    long_text = "a" * 150
    conversation = aggregate([human(1, long_text), human(2, "ok")])[SESSION]
    assert conversation.lastMessage == "a" * 100 + "..."


def test_malformed_rows_are_treated_as_empty_human_messages():
    message = RawMessage.from_supabase({"id": "7", "session_id": SESSION, "message": None})
    assert message.role == "human"
    assert message.text == ""
    assert message.id == 7

    odd = RawMessage.from_supabase({"id": "x", "session_id": 5, "message": {"type": "", "content": ["a"]}})
    assert odd.id == 0
    assert odd.sessionId == ""
    assert odd.role == "human"
    assert odd.text == ""

    assert aggregate([message])[SESSION].messageCount == 1


def test_aggregate_is_idempotent():
    messages = [
        human(1, "Nombre: Ana Lopez\nQuiero botox"),
        ai(2, "https://cal.com/clinica"),
        human(3, "tirzepatide?", session="18095550002@s.whatsapp.net"),
    ]
    first = aggregate(messages)
    second = aggregate(messages)
    assert {k: v.model_dump() for k, v in first.items()} == {k: v.model_dump() for k, v in second.items()}


def test_is_excluded_by_name_or_phone_prefix():
    assert is_excluded("Eric Henoc", "18095550001@s.whatsapp.net")
    assert is_excluded("ERIC HENOC MARTINEZ", "")
    assert is_excluded("Henoc, Eric", "")
    assert is_excluded("Unknown", "14078729969@s.whatsapp.net")
    assert not is_excluded("Eric Lopez", "18095550001@s.whatsapp.net")


def test_test_account_never_reaches_conversation_list(test_account_rows, make_chat_row):
    rows = test_account_rows + [make_chat_row(20, SESSION, "human", "Nombre: Ana Lopez\nbotox")]
    messages = [RawMessage.from_supabase(row) for row in rows]

    conversations = build_conversations(messages)

    assert [c.sessionId for c in conversations] == [SESSION]
    assert exclude_test_data(aggregate(messages).values()) == conversations


def test_test_account_excluded_by_name_on_any_session():
    messages = [human(1, "Nombre: Eric Henoc\nhola", session="19995550000@s.whatsapp.net")]
    assert build_conversations(messages) == []
