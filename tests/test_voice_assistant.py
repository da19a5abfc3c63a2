from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda

from byajbook.assistant import OfflineAssistant, OllamaAssistant, context_summary, create_assistant
from byajbook.models import Step, TranscriptEvent
from byajbook.voice import FinalTranscriptGate, ScriptedVoiceIO


def test_gate_only_steps_on_final_transcripts(agent):
    voice = ScriptedVoiceIO([
        TranscriptEvent(transcript="add", is_final=False),
        TranscriptEvent(transcript="add loan", is_final=True),
        TranscriptEvent(transcript="Pri", is_final=False),
        TranscriptEvent(transcript="Priya", is_final=False),
        TranscriptEvent(transcript="Priya", is_final=True),
    ])
    gate = FinalTranscriptGate(agent, voice)

    voice.play()

    assert len(gate.results) == 2
    assert gate.state.current_step == Step.AMOUNT
    assert gate.heard == "Priya"
    assert len(voice.spoken) == 2


def test_gate_interim_leaves_state(agent):
    voice = ScriptedVoiceIO([])
    gate = FinalTranscriptGate(agent, voice)
    before = gate.state

    gate.feed(TranscriptEvent(transcript="add lo", is_final=False))
    assert gate.state == before
    assert gate.heard == "add lo"
    assert voice.spoken == []


def test_offline_assistant_points_to_menu():
    reply = OfflineAssistant("hi").respond("mausam kaisa hai")
    assert "ledger" in reply
    assert "add loan" in reply


def test_ollama_assistant_uses_prompt_and_context():
    seen = {}

    def fake_llm(prompt_value):
        seen["text"] = prompt_value.to_string()
        return AIMessage(content="Sankda means 12% a year.")

    assistant = OllamaAssistant(llm=RunnableLambda(fake_llm))
    reply = assistant.respond("what is sankda?", "Portfolio overview")

    assert reply == "Sankda means 12% a year."
    assert "what is sankda?" in seen["text"]
    assert "Portfolio overview" in seen["text"]


def test_ollama_assistant_falls_back_when_model_is_down():
    def broken_llm(prompt_value):
        raise ConnectionError("ollama not running")

    assistant = OllamaAssistant(llm=RunnableLambda(broken_llm))
    assert "ledger" in assistant.respond("hello there")


def test_context_summary(builder):
    from byajbook.models import InterestMethod, LoanDraft
    loan = builder.build(LoanDraft(borrower_name="Priya", amount=200000,
                                   interest_method=InterestMethod.SANKDA, years=1))
    text = context_summary([loan])
    assert "Total loans: 1" in text
    assert "₹200000" in text
    assert context_summary([]) == "No loans recorded yet."


def test_create_assistant_offline_by_default():
    assert isinstance(create_assistant("offline"), OfflineAssistant)
