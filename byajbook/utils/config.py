import os

# Paths
LEDGER_PATH = os.environ.get("BYAJBOOK_LEDGER_PATH", "data/ledger.json")
LOANS_KEY = "byajbook_loans"
PAYMENTS_KEY = "byajbook_payments"

# Service
DEFAULT_LANGUAGE = os.environ.get("BYAJBOOK_LANGUAGE", "en")
SUPPORTED_LANGUAGES = ("en", "hi")
SESSION_TIMEOUT = int(os.environ.get("BYAJBOOK_SESSION_TIMEOUT", "1800"))  # seconds
LOG_LEVEL = os.environ.get("BYAJBOOK_LOG_LEVEL", "INFO")

# General assistant backend: "ollama" or "offline"
ASSISTANT_BACKEND = os.environ.get("BYAJBOOK_ASSISTANT", "offline")
OLLAMA_MODEL = os.environ.get("BYAJBOOK_OLLAMA_MODEL", "mistral")

# Loan constraints
MIN_LOAN_AMOUNT = 100
MIN_DURATION_YEARS = 0.1
MIN_INTEREST_RATE = 0.0
SANKDA_RATE = 12.0
DAYS_PER_YEAR = 365
DUE_REMINDER_DAYS = 7

# Slots collected by the conversational flow, in prompt order
REQUIRED_SLOTS = ["name", "amount", "rate", "duration"]

# --- Amount vocabulary ---
# (pattern, multiplier); the number in front may carry a decimal part
MAGNITUDE_WORDS = [
    (r"lakhs?|lacs?|lack|लाख", 100_000),
    (r"crores?|cr|करोड़|करोड", 10_000_000),
    (r"thousand|hajar|hazar|hazaar|हजार|हज़ार|k", 1_000),
]
CURRENCY_PREFIX = r"(?:₹|rs\.?|inr|rupees?)"

# --- Rate vocabulary ---
SANKDA_WORDS = ["sankda", "sankada", "saankda", "सांकडा", "सांकड़ा"]
PERCENT_WORDS = r"%|percent|per\s*cent|pratishat|प्रतिशत|टक्का"
MONTHLY_WORDS = ["monthly", "month", "months", "mahina", "mahine", "maheena",
                 "mahinay", "per month", "pm", "महीना", "महीने", "माहिना"]

# --- Duration vocabulary ---
YEAR_UNITS = r"years?|yrs?|saal|sal|varsh|साल|वर्ष"
MONTH_UNITS = r"months?|mahin[ae]|maheen[ae]|महीन[ाे]|माहिना"

# --- Intent vocabulary ---
EXIT_PATTERNS = [
    r"(bye|goodbye|good bye|alvida|see you)",
    r"(thank you|thanks|thanku|dhanyawad|shukriya|ok|okay|oky|okhy|thik|theek)\s+(bye|goodbye)",
    r"(bye|goodbye)\s+(thank you|thanks|thanku|dhanyawad|shukriya|ok|okay|oky|thik|theek)",
    r"(byr|bai|bhy|bye+)",
    r"(exit|close|quit|band|khatam|gaya|finish|over)",
    r"(band karo|band kar do|band kardo|chat band karo|close chat|close it)",
    r"(that'?s all|bas|enough|ho gaya|done hai)",
    r"(अलविदा|बंद करो)",
]

DENY_WORDS = [
    "no", "nope", "nah", "nay", "not", "nahi", "nai", "nahin", "nahe", "naa",
    "mat", "mana", "cancel", "stop", "abort", "rok", "chod", "refuse",
    "reject", "decline", "deny", "disagree", "inkar", "never", "skip",
    "नहीं", "ना", "रद्द",
]
DENY_PHRASES = [
    "bilkul nahi", "manzoor nahi", "taiyar nahi", "dont want", "don't want",
    "not interested", "not now", "maybe later", "some other time",
    "forget it", "never mind", "nahi chahiye", "nahi karna", "abhi nahi",
    "baad mein", "absolutely not", "definitely not", "kabhi nahi",
    "koi jarurat nahi", "cancel karo", "rehne do",
]
DENY_PATTERNS = [r"no+", r"nah+", r"nope+", r"n+o+"]

AFFIRM_WORDS = [
    "yes", "yeah", "yep", "yup", "ya", "aye", "sure", "ok", "okay", "alright",
    "haan", "ha", "han", "haa", "ji", "bilkul", "theek", "thik", "accha",
    "acha", "sahi", "fine", "perfect", "correct", "right", "confirm",
    "confirmed", "accept", "agree", "approved", "proceed", "create", "banao",
    "karo", "absolutely", "definitely", "certainly", "chalega", "हाँ", "हां",
    "जी", "ठीक",
]
AFFIRM_PHRASES = [
    "ji haan", "theek hai", "go ahead", "do it", "kar do", "of course",
    "for sure", "bilkul theek", "pura theek", "ekdum sahi", "perfect hai",
    "sounds good", "looks good", "thats fine", "that's fine", "no problem",
    "why not", "ho jaaye", "kar sakte hain", "theek lagta hai", "ठीक है",
]
AFFIRM_PATTERNS = [r"y+e+s*", r"y+a+h*", r"y+e+p+", r"o+k+a*y*", r"sure+"]

LOAN_KEYWORDS = [
    "loan", "add loan", "create loan", "new loan", "make loan", "give loan",
    "lend", "lending", "udhar", "udhaar", "karz", "karj", "karza", "rin",
    "paisa dena", "naya loan", "loan dena", "loan banao", "loan banana",
    "loan karna", "loan jodhna", "उधार", "कर्ज", "कर्ज़", "ऋण",
]
LOAN_PATTERNS = [
    r"\w+\s+(ko|for|ke liye)\s+(loan|udhar|paisa|money)",
    r"(loan|udhar|paisa|money)\s+(for|to)\s+\w+",
    r"(dena|give|add|make|jodhna)\s+.*\b(loan|udhar)",
    r"(mujhe|muje)\s+.*\b(loan|udhar|paisa)\s+(chahiye|hai|jodhna|banana)",
]
# A trigger opens "add raj" / "make loan"; on its own only the second list counts
LOAN_TRIGGERS = ["add", "create", "new", "make", "jodhna"]
LOAN_TRIGGERS_ALONE = ["add", "new", "jodhna"]

GREETING_WORDS = [
    "hi", "hii", "hiii", "hiiii", "hello", "helo", "helloo", "hey", "heyy",
    "heyyy", "yo", "yoo", "sup", "whatsup", "wassup", "namaste", "namaskar",
    "hy", "hyy", "hyyy", "kese ho", "kaise ho", "how are you",
    "kya haal hai", "kya chal raha hai", "sab theek", "whats up",
    "kaise hain", "kese hain", "नमस्ते", "नमस्कार",
]
GREETING_PATTERNS = [
    r"(hi+|hello+|helo+|hey+|yo+|hy+|namaste)\s+(ai|bot|assistant|there|dear|bro|buddy|friend|ji)",
    r"(good\s+)?(morning|afternoon|evening|night)(\s+(ai|bot|assistant|there|dear))?",
    r"(kese|kaise)\s+(ho|hain)(\s+aap)?",
    r"(how\s+are\s+you|what'?s\s+up|whats\s+up)(\s+(doing|going))?",
    r"h+[iy]+",
    r"h+[ae]+l+[oy]*",
    r"h+e+y+",
    r"namaste+",
    r"sup+",
    r"yo+",
]
# rapidfuzz ratio threshold for misspelt greetings ("namastey", "helllo")
GREETING_FUZZY_WORDS = ["hello", "namaste", "namaskar", "good morning", "good evening", "how are you"]
GREETING_FUZZY_THRESHOLD = 85

HELP_WORDS = ["help", "madad", "sahayata", "what can you do", "kya kar sakte ho", "मदद"]

# Words that can never be a borrower name on their own
NON_NAME_WORDS = {
    "ai", "bot", "assistant", "there", "dear", "bro", "buddy", "friend",
    "kese", "ho", "kaise", "hain", "aap", "how", "are", "you", "doing",
    "going", "up", "arre", "arrey", "kya", "haal", "hai", "chal", "raha",
    "sab", "all", "mujhe", "muje", "ek", "kaam", "chahiye", "jodhna",
    "thanks", "thank", "dhanyawad", "shukriya", "help", "madad", "add",
    "new", "banana", "karna", "kar", "do", "make", "give", "dena", "lena",
    "loan", "udhar", "udhaar", "karz", "karj", "paisa", "money", "amount",
    "rupee", "rupees", "rs", "inr", "interest", "rate", "byaj", "faida",
    "percent", "yearly", "monthly", "sankda", "saal", "sal", "mahina",
    "calculate", "year", "years", "month", "months", "duration", "time",
    "period", "samay", "lakh", "lac", "thousand", "hajar", "crore", "what",
    "when", "where", "why", "kab", "kahan", "kyun", "this", "that", "these",
    "those", "yeh", "woh", "ye", "wo", "is", "the", "a", "an", "and", "or",
    "but", "aur", "lekin", "par", "clear", "saaf", "samjh", "understand",
    "samajh", "got", "it", "show", "list", "payment", "pay", "paid",
    "one", "two", "three", "four", "five", "six", "seven", "eight", "nine",
    "ten", "ek", "teen", "char", "paanch", "das", "half", "aadha", "me",
    "him", "her", "us", "them", "someone", "somebody", "pe", "please", "pls",
} | set(GREETING_WORDS) | set(DENY_WORDS) | set(AFFIRM_WORDS) | set(LOAN_TRIGGERS)

# Deny words that are also everyday names; a lone "Mat" answers the name question
NAME_LIKE_DENY_WORDS = {"mat", "mana"}
NON_NAME_WORDS -= NAME_LIKE_DENY_WORDS

# Marker and filler words stripped from an extracted name
NAME_STOP_WORDS = NON_NAME_WORDS | {
    "name", "naam", "mera", "my", "ka", "ke", "ki", "ko", "for", "liye",
    "to", "at", "on", "of", "with", "pe", "per", "se", "borrower", "banao",
}
MAX_NAME_WORDS = 4
