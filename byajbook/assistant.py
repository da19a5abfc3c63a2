import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from langchain_core.prompts import ChatPromptTemplate
from langchain_ollama import ChatOllama

from .models import Loan, Payment
from .prompts import format_money, render
from .reports import portfolio_summary
from .utils.config import ASSISTANT_BACKEND, DEFAULT_LANGUAGE, OLLAMA_MODEL

logger = logging.getLogger(__name__)

SYSTEM_PROMPTS = {
    "en": (
        "You are an AI assistant for ByajBook, a loan management app that helps users "
        "manage personal money lending and interest calculations.\n"
        "Interest methods: monthly (rate per month), yearly (simple, rate per year) and "
        "sankda (fixed 12% yearly).\n"
        "Answer briefly. To create a loan, tell the user to say \"add loan\"; never invent "
        "loan records yourself."
    ),
    "hi": (
        "Aap ByajBook ke AI assistant hain, ek loan management app jo personal lending "
        "aur byaj ka hisaab rakhta hai.\n"
        "Byaj ke tareeke: monthly (mahine ka rate), yearly (saal ka simple rate) aur "
        "sankda (fixed 12% saal).\n"
        "Chhota jawab dijiye, Hinglish me. Naya loan banane ke liye user ko \"add loan\" "
        "bolne ko kahiye; khud se loan record mat banaiye."
    ),
}

OFFLINE_REPLIES = {
    "en": "🤖 I can only help with your loan ledger right now.",
    "hi": "🤖 Abhi main sirf aapke loan ledger me madad kar sakta hoon.",
}


def context_summary(loans: List[Loan], payments: Optional[List[Payment]] = None) -> str:
    """Short portfolio overview handed to the assistant with each question."""
    if not loans:
        return "No loans recorded yet."
    summary = portfolio_summary(loans, payments)
    return (
        "Portfolio overview:\n"
        f"- Total loans: {len(loans)}\n"
        f"- Active loans: {summary['active_loans']}\n"
        f"- Total amount lent: {format_money(summary['total_lent'])}\n"
        f"- Total amount received: {format_money(summary['total_received'])}\n"
        f"- Outstanding: {format_money(summary['total_outstanding'])}"
    )


class GeneralAssistant(ABC):
    """Answers utterances the loan dialogue does not recognise."""

    @abstractmethod
    def respond(self, utterance: str, context_summary: str = "") -> str:
        ...


class OfflineAssistant(GeneralAssistant):

    def __init__(self, language: str = DEFAULT_LANGUAGE):
        self.language = language

    def respond(self, utterance: str, context_summary: str = "") -> str:
        reply = OFFLINE_REPLIES.get(self.language, OFFLINE_REPLIES["en"])
        return f"{reply}\n\n{render(self.language, 'menu')}"


class OllamaAssistant(GeneralAssistant):
    """Free-form answers from a local Ollama model, with an offline fallback."""

    def __init__(self, model: str = OLLAMA_MODEL, language: str = DEFAULT_LANGUAGE, llm=None):
        self.language = language
        self.llm = llm if llm is not None else ChatOllama(model=model, temperature=0)
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", SYSTEM_PROMPTS.get(language, SYSTEM_PROMPTS["en"])),
            ("user", "{context}\n\nUser question: {question}"),
        ])
        self.fallback = OfflineAssistant(language)

    def respond(self, utterance: str, context_summary: str = "") -> str:
        chain = self.prompt | self.llm
        try:
            result = chain.invoke({"context": context_summary, "question": utterance})
            return getattr(result, "content", str(result))
        except Exception as e:
            logger.error(f"Ollama assistant failed: {e}")
            return self.fallback.respond(utterance, context_summary)


def create_assistant(backend: str = ASSISTANT_BACKEND, language: str = DEFAULT_LANGUAGE) -> GeneralAssistant:
    if backend == "ollama":
        logger.info(f"General assistant: Ollama ({OLLAMA_MODEL})")
        return OllamaAssistant(OLLAMA_MODEL, language)
    return OfflineAssistant(language)
