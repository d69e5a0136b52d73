"""Canned replies used before parsing and when the assistant is offline."""
from __future__ import annotations

from typing import Optional

from agenda_ai.text import has_phrase, tokenize

GREETING = "Como posso ajudar você hoje?"

LOCAL_RESPONSES = {
    "oi": f"Olá! {GREETING}",
    "ola": f"Olá! {GREETING}",
    "bom dia": f"Bom dia! {GREETING}",
    "boa tarde": f"Boa tarde! {GREETING}",
    "boa noite": f"Boa noite! {GREETING}",
    "quem e voce": (
        "Sou um assistente virtual que ajuda você a gerenciar sua agenda e tarefas. "
        "Posso adicionar eventos, reuniões e tarefas ao seu calendário."
    ),
    "o que voce faz": (
        "Eu ajudo você a gerenciar sua agenda. Posso criar eventos, tarefas, "
        "e ajudar você a se organizar melhor."
    ),
    "como voce funciona": (
        "Eu interpreto seus pedidos em português para ajudar a gerenciar sua agenda. "
        "Basta me dizer o que precisa adicionar ao calendário."
    ),
    "como adicionar um evento": (
        "Você pode dizer algo como 'Adicione uma reunião amanhã às 15h' ou "
        "'Crie um evento para sexta-feira'."
    ),
    "ajuda": (
        "Posso ajudar você a gerenciar sua agenda. Experimente comandos como "
        "'adicionar reunião', 'criar evento', ou 'agendar tarefa'. O que você precisa hoje?"
    ),
}

QUERY_PHRASES = (
    "quais meus proximos compromissos",
    "o que tenho hoje",
    "minha agenda",
    "quais sao minhas tarefas",
    "tenho alguma reuniao",
    "compromissos de hoje",
    "agenda da semana",
)
QUERY_KEYWORDS = (
    "quais", "quando", "onde", "que horas", "horario", "proximo", "tenho", "agenda",
    "compromisso", "mostrar", "listar", "ver", "consultar", "proximos", "essa semana",
    "hoje", "amanha", "pendente",
)
CREATION_KEYWORDS = ("adicionar", "criar", "marcar", "agendar", "novo", "nova")

EVENT_KEYWORDS = (
    "adicionar", "criar", "marcar", "agendar", "lembrar", "lembrete para",
    "evento", "reuniao", "compromisso", "tarefa", "encontro", "nova", "novo",
    "viagem", "viajar", "visitar", "ir para", "passear", "excursao", "passeio",
    "ferias", "feriado", "voo", "embarque", "hotel", "hospedagem",
    "almoco", "jantar", "cafe",
)

FALLBACK_RESPONSES = (
    "Desculpe, estou com problemas de conexão no momento. Você pode adicionar eventos "
    "manualmente pelo calendário.",
    "Parece que estou offline. Posso ajudar com tarefas básicas como adicionar eventos ao calendário.",
    "Não consegui conectar ao serviço. Tente novamente mais tarde ou adicione eventos pelo calendário.",
    "Estou temporariamente indisponível para processar solicitações complexas. "
    "Tente usar comandos mais simples ou adicione eventos manualmente.",
    "A conexão com o servidor está instável. Que tal adicionar sua tarefa diretamente no calendário?",
)

OFFLINE_NOTICE = (
    "Estou offline no momento, mas posso ajudar a adicionar esse compromisso básico. "
    "Por favor, confirme os detalhes:"
)
MISSING_DETAILS = (
    "Parece que você quer criar um evento, mas preciso de mais detalhes. "
    "Poderia fornecer informações como data, hora e local?"
)
GENERIC_HELP = (
    "Não entendi completamente o que você quer fazer. Posso ajudar você a gerenciar sua agenda, "
    "criar tarefas, ou responder perguntas sobre seus compromissos. Como posso ajudar?"
)


def local_response(text: str) -> Optional[str]:
    tokens = tokenize(text)
    exact = LOCAL_RESPONSES.get(" ".join(tokens))
    if exact:
        return exact
    for phrase, reply in LOCAL_RESPONSES.items():
        if has_phrase(tokens, phrase):
            return reply
    return None


def _contains_any(tokens, phrases) -> bool:
    return any(has_phrase(tokens, p) for p in phrases)


def looks_like_event_creation(text: str) -> bool:
    return _contains_any(tokenize(text), EVENT_KEYWORDS)


def is_query_about_appointments(text: str) -> bool:
    tokens = tokenize(text)
    if _contains_any(tokens, QUERY_PHRASES):
        return True
    return _contains_any(tokens, QUERY_KEYWORDS) and not _contains_any(tokens, CREATION_KEYWORDS)


def fallback_response(attempts: int) -> str:
    """Rotates through the offline replies as connection attempts accumulate."""
    return FALLBACK_RESPONSES[attempts % len(FALLBACK_RESPONSES)]