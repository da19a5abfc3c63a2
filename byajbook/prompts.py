"""
User-facing prompt templates for the loan-creation dialogue.

Two languages are kept side by side: ``en`` and romanised Hindi ``hi``.
Templates are plain ``str.format`` strings keyed by what the dialogue is
doing; ``render`` falls back to English for an unknown language or key.
"""

from typing import Dict

from .utils.config import DEFAULT_LANGUAGE

RATE_EXAMPLES = {
    "en": '• "12% yearly" - 12% per year\n• "2% monthly" - 2% per month\n• "sankda" - Traditional method (12% yearly)',
    "hi": '• "12% yearly" - Saal me 12%\n• "2% monthly" - Mahine me 2%\n• "sankda" - Traditional method (12% saal)',
}

PROMPTS: Dict[str, Dict[str, str]] = {
    "en": {
        "menu": (
            "👋 Hello! I'm your ByajBook assistant.\n\n"
            "I can help you:\n"
            "• 📝 Add a new loan (\"add loan\")\n"
            "• 💰 Record a payment\n"
            "• 📊 Show your lending summary\n\n"
            "What would you like to do?"
        ),
        "neutral_menu": "👍 Okay. Say \"add loan\" whenever you want to record a new loan.",
        "farewell": "👋 Goodbye! Your ledger is safe. Come back any time.",
        "ask_name": "📝 Let's add a new loan!\n\nWho is the borrower? Tell me their name.",
        "retry_name": (
            "🤔 I didn't catch the borrower's name. Examples:\n"
            "• \"Ramesh\"\n• \"name is Priya Sharma\"\n• \"Raj ko 50000\"\n\n"
            "What is the borrower's name?"
        ),
        "ask_amount": "✅ Got it, \"{name}\"!\n\nHow much are you lending?",
        "retry_amount": (
            "🤔 The amount isn't clear. Examples:\n"
            "• \"50000\"\n• \"₹1,00,000\"\n• \"2 lakh\"\n\n"
            "How much is the loan? (minimum ₹{minimum})"
        ),
        "ask_rate": "💰 {amount} noted!\n\nNow tell me the interest rate:\n{rate_examples}",
        "retry_rate": "🤔 Interest rate not clear. Examples:\n{rate_examples}\n\nTry again?",
        "ask_duration": (
            "📈 Interest: {rate}\n\nFor how long?\n"
            "• \"1 year\"\n• \"6 months\"\n• \"2 saal\""
        ),
        "retry_duration": (
            "🤔 Duration not clear. Examples:\n"
            "• \"1 year\"\n• \"18 months\"\n• \"2 saal\"\n\n"
            "How long is the loan for?"
        ),
        "summary": (
            "📋 Please confirm the loan:\n\n"
            "👤 Borrower: {name}\n"
            "💰 Amount: {amount}\n"
            "📈 Interest: {rate}\n"
            "⏱️ Duration: {duration}\n"
            "💵 Interest amount: {interest}\n"
            "🧾 Total payable: {total}\n\n"
            "Shall I create it? (yes/no)"
        ),
        "confirm_again": "Please answer yes to create the loan or no to discard it.",
        "created": (
            "🎉 Loan created for {name}!\n\n"
            "🆔 Loan ID: {loan_id}\n"
            "🧾 Total payable: {total}\n"
            "📅 Due on: {due_date}"
        ),
        "discarded": "❌ Okay, the loan was not created.",
        "cancelled": "❌ Loan creation cancelled. Nothing was saved.",
        "save_failed": "⚠️ I couldn't save the loan right now. Say yes to try again or no to discard it.",
        "generic_retry": "😕 Sorry, something went wrong. Could you say that again?",
        "rate_sankda": "Sankda (12% yearly)",
        "rate_monthly": "{rate}% monthly",
        "rate_yearly": "{rate}% yearly",
        "duration_months": "{months} months",
        "duration_years": "{years} years",
    },
    "hi": {
        "menu": (
            "👋 Namaste! Main aapka ByajBook assistant hoon.\n\n"
            "Main aapki madad kar sakta hoon:\n"
            "• 📝 Naya loan jodna (\"add loan\")\n"
            "• 💰 Payment record karna\n"
            "• 📊 Lending summary dekhna\n\n"
            "Kya karna hai?"
        ),
        "neutral_menu": "👍 Theek hai. Jab naya loan jodna ho, \"add loan\" bolo.",
        "farewell": "👋 Alvida! Aapka ledger safe hai. Phir milenge.",
        "ask_name": "📝 Chaliye naya loan jodte hain!\n\nBorrower ka naam kya hai?",
        "retry_name": (
            "🤔 Naam samajh nahi aaya. Examples:\n"
            "• \"Ramesh\"\n• \"naam Priya Sharma\"\n• \"Raj ko 50000\"\n\n"
            "Borrower ka naam batao?"
        ),
        "ask_amount": "✅ Great! \"{name}\" ka naam save ho gaya!\n\nAb amount kitna dena hai?",
        "retry_amount": (
            "🤔 Amount clear nahi hai. Sirf numbers me batao:\n"
            "• \"50000\"\n• \"₹1,00,000\"\n• \"2 lakh\"\n\n"
            "Amount kitna hai? (kam se kam ₹{minimum})"
        ),
        "ask_rate": "💰 Perfect! {amount} amount noted!\n\nAb interest rate batao:\n{rate_examples}",
        "retry_rate": "🤔 Interest rate samajh nahi aaya. Examples:\n{rate_examples}\n\nFir se try karo?",
        "ask_duration": (
            "📈 Byaj: {rate}\n\nKitne samay ke liye?\n"
            "• \"1 saal\"\n• \"6 mahine\"\n• \"2 years\""
        ),
        "retry_duration": (
            "🤔 Samay clear nahi hai. Examples:\n"
            "• \"1 saal\"\n• \"18 mahine\"\n• \"2 years\"\n\n"
            "Loan kitne samay ka hai?"
        ),
        "summary": (
            "📋 Loan confirm karo:\n\n"
            "👤 Borrower: {name}\n"
            "💰 Amount: {amount}\n"
            "📈 Byaj: {rate}\n"
            "⏱️ Samay: {duration}\n"
            "💵 Byaj ki rakam: {interest}\n"
            "🧾 Kul wapsi: {total}\n\n"
            "Loan bana doon? (haan/nahi)"
        ),
        "confirm_again": "Loan banane ke liye haan bolo, ya hatane ke liye nahi.",
        "created": (
            "🎉 {name} ka loan ban gaya!\n\n"
            "🆔 Loan ID: {loan_id}\n"
            "🧾 Kul wapsi: {total}\n"
            "📅 Due date: {due_date}"
        ),
        "discarded": "❌ Theek hai, loan nahi banaya.",
        "cancelled": "❌ Loan banana cancel ho gaya. Kuch save nahi hua.",
        "save_failed": "⚠️ Abhi loan save nahi ho paaya. Dobara try ke liye haan bolo, ya nahi.",
        "generic_retry": "😕 Maaf kijiye, kuch gadbad ho gayi. Ek baar phir boliye?",
        "rate_sankda": "Sankda (12% saal)",
        "rate_monthly": "{rate}% mahina",
        "rate_yearly": "{rate}% saal",
        "duration_months": "{months} mahine",
        "duration_years": "{years} saal",
    },
}


def render(language: str, key: str, **values) -> str:
    templates = PROMPTS.get(language) or PROMPTS.get(DEFAULT_LANGUAGE, PROMPTS["en"])
    template = templates.get(key) or PROMPTS["en"][key]
    if "rate_examples" not in values:
        values["rate_examples"] = RATE_EXAMPLES.get(language, RATE_EXAMPLES["en"])
    return template.format(**values)


def format_money(value: float) -> str:
    return f"₹{round(value)}"


def format_number(value: float) -> str:
    """12.0 -> "12", 1.5 -> "1.5"."""
    return f"{value:g}"
