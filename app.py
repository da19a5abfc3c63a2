from flask import Flask, request, jsonify
from flask_cors import CORS
import logging
import threading
import uuid
import time
from datetime import datetime

from byajbook.assistant import context_summary, create_assistant
from byajbook.exceptions import PaymentRejected, PersistenceError
from byajbook.interest import payable
from byajbook.ledger import JsonLedgerStore
from byajbook.loan_builder import LoanRecordBuilder
from byajbook.master_agent import MasterAgent
from byajbook.models import PaymentType, TranscriptEvent
from byajbook.reports import borrower_summaries, due_reminders, interest_earnings, portfolio_summary
from byajbook.utils.config import (
    DEFAULT_LANGUAGE, DUE_REMINDER_DAYS, LEDGER_PATH, LOG_LEVEL, SESSION_TIMEOUT,
    SUPPORTED_LANGUAGES,
)

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


# --- Utility Functions ---

def get_session_id(request):
    """Retrieve or create a session ID."""
    session_id = request.headers.get('X-Session-ID')

    if not session_id:
        session_id = f"session_{uuid.uuid4().hex[:16]}"

    return session_id


def loan_view(loan):
    """Loan as JSON with its computed totals."""
    total = payable(loan)
    return {
        **loan.model_dump(mode='json'),
        'final_amount': round(total, 2),
        'outstanding': round(max(total - loan.total_paid, 0.0), 2),
    }


def create_app(store=None, assistant=None, language=DEFAULT_LANGUAGE):
    """
    Build the Flask app around one ledger store and one dialogue agent.

    Each ``X-Session-ID`` gets its own ConversationState; sessions idle for
    longer than SESSION_TIMEOUT are dropped on the next request.
    """
    app = Flask(__name__)
    CORS(app)

    store = store or JsonLedgerStore(LEDGER_PATH)
    assistant = assistant or create_assistant(language=language)
    master_agent = MasterAgent(LoanRecordBuilder(store), language=language)
    user_sessions = {}
    sessions_lock = threading.Lock()

    def cleanup_sessions():
        current_time = time.time()
        with sessions_lock:
            expired_sessions = [
                session_id for session_id, session_data in user_sessions.items()
                if current_time - session_data.get('last_activity', 0) > SESSION_TIMEOUT
            ]
            for session_id in expired_sessions:
                del user_sessions[session_id]
                logger.info(f"Cleaned up expired session: {session_id}")

    def new_session(language=None):
        if language not in SUPPORTED_LANGUAGES:
            language = master_agent.language
        return {
            'state': master_agent.new_state(language),
            'last_activity': time.time(),
            'created_at': datetime.now().isoformat(),
            'interaction_count': 0,
            'lock': threading.Lock()
        }

    def initialize_user_session(session_id, language=None):
        with sessions_lock:
            if session_id not in user_sessions:
                user_sessions[session_id] = new_session(language)
            session = user_sessions[session_id]
            session['last_activity'] = time.time()
        return session

    def run_step(session, step, counts=True):
        """Run one dialogue step with the session held; later requests see its new state."""
        with session['lock']:
            if counts:
                session['interaction_count'] += 1
            result = step(session['state'])
            session['state'] = result.state
            return result

    def respond(session_id, session, result, utterance):
        response = result.to_response()

        if result.delegate:
            response['message'] = assistant.respond(utterance, context_summary(store.list_loans()))
            response['worker'] = 'assistant'

        response['heard'] = result.heard
        response['session_id'] = session_id
        response['interaction_count'] = session['interaction_count']
        return jsonify(response)

    @app.before_request
    def expire_sessions():
        cleanup_sessions()

    # --- Conversation Endpoints ---

    @app.route('/chat', methods=['POST'])
    def chat():
        """
        Primary conversational endpoint.
        """
        try:
            session_id = get_session_id(request)
            data = request.get_json(silent=True) or {}
            user_input = str(data.get('message', '')).strip()

            if not user_input:
                return jsonify({
                    'message': 'Please provide a message.',
                    'error': 'empty_input'
                }), 400

            session = initialize_user_session(session_id, data.get('language'))
            result = run_step(session, lambda state: master_agent.step(state, user_input))
            return respond(session_id, session, result, user_input)

        except Exception as e:
            logger.error(f"Error in /chat: {e}")
            return jsonify({
                'message': 'Sorry, I encountered an error. Please try again.',
                'error': 'server_error'
            }), 500

    @app.route('/voice', methods=['POST'])
    def voice():
        """
        Transcript events from a speech front end; only final ones move the dialogue.
        """
        try:
            session_id = get_session_id(request)
            data = request.get_json(silent=True) or {}
            event = TranscriptEvent(
                transcript=str(data.get('transcript', '')),
                is_final=bool(data.get('is_final', False)),
            )

            session = initialize_user_session(session_id, data.get('language'))
            result = run_step(
                session,
                lambda state: master_agent.handle_transcript(state, event),
                counts=event.is_final,
            )
            return respond(session_id, session, result, event.transcript)

        except Exception as e:
            logger.error(f"Error in /voice: {e}")
            return jsonify({
                'message': 'Sorry, I encountered an error. Please try again.',
                'error': 'server_error'
            }), 500

    # --- Ledger Endpoints ---

    @app.route('/loans', methods=['GET'])
    def list_loans():
        try:
            loans = store.list_loans()
            if request.args.get('active') == 'true':
                loans = [loan for loan in loans if loan.is_active]
            return jsonify({'loans': [loan_view(loan) for loan in loans]})
        except PersistenceError as e:
            logger.error(f"Error in /loans: {e}")
            return jsonify({'error': 'storage_unavailable', 'message': str(e)}), 500

    @app.route('/loans/<loan_id>', methods=['GET'])
    def get_loan(loan_id):
        loan = store.get_loan(loan_id)
        if loan is None:
            return jsonify({'error': 'Loan not found'}), 404
        return jsonify(loan_view(loan))

    @app.route('/loans/<loan_id>/payments', methods=['GET', 'POST'])
    def loan_payments(loan_id):
        if store.get_loan(loan_id) is None:
            return jsonify({'error': 'Loan not found'}), 404

        if request.method == 'GET':
            payments = store.list_payments(loan_id)
            return jsonify({'payments': [p.model_dump(mode='json') for p in payments]})

        data = request.get_json(silent=True) or {}
        try:
            amount = float(data.get('amount', 0))
            payment_type = PaymentType(data.get('type', PaymentType.PARTIAL.value))
        except (TypeError, ValueError):
            return jsonify({'error': 'invalid_payment', 'message': 'Invalid amount or payment type.'}), 400

        try:
            payment = store.record_payment(loan_id, amount, payment_type)
        except PaymentRejected as e:
            return jsonify({'error': 'payment_rejected', 'message': str(e)}), 400
        except PersistenceError as e:
            logger.error(f"Error recording payment on {loan_id}: {e}")
            return jsonify({'error': 'storage_unavailable', 'message': str(e)}), 500

        return jsonify({
            'payment': payment.model_dump(mode='json'),
            'loan': loan_view(store.get_loan(loan_id))
        }), 201

    # --- Report Endpoints ---

    @app.route('/reports/summary', methods=['GET'])
    def reports_summary():
        loans = store.list_loans()
        return jsonify({
            'portfolio': portfolio_summary(loans, store.list_payments()),
            'interest': interest_earnings(loans),
            'borrowers': borrower_summaries(loans)
        })

    @app.route('/reports/reminders', methods=['GET'])
    def reports_reminders():
        days = request.args.get('days', DUE_REMINDER_DAYS, type=int)
        return jsonify({'reminders': due_reminders(store.list_loans(), within_days=days)})

    # --- Session Endpoints ---

    @app.route('/session/<session_id>', methods=['GET'])
    def get_session(session_id):
        """Get session status (for debugging)."""
        session = user_sessions.get(session_id)
        if session is not None:
            state = session['state']
            return jsonify({
                'session_id': session_id,
                'created_at': session.get('created_at'),
                'last_activity': session.get('last_activity'),
                'interaction_count': session.get('interaction_count', 0),
                'mode': state.mode.value,
                'current_step': state.current_step.value,
                'language': state.language,
                'draft': state.draft.model_dump(mode='json', exclude_none=True)
            })
        return jsonify({'error': 'Session not found'}), 404

    @app.route('/reset/<session_id>', methods=['POST'])
    def reset_session(session_id):
        """Reset a session."""
        session = user_sessions.get(session_id)
        if session is not None:
            with session['lock']:
                session['state'] = master_agent.new_state(session['state'].language)
                session['interaction_count'] = 0
            return jsonify({'message': 'Session reset successfully.'})
        return jsonify({'error': 'Session not found'}), 404

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.now().isoformat(),
            'active_sessions': len(user_sessions),
            'assistant': type(assistant).__name__
        })

    return app


app = create_app()


if __name__ == '__main__':
    logger.info("=" * 60)
    logger.info("BYAJBOOK Lending Ledger")
    logger.info("=" * 60)
    logger.info("Server starting on http://0.0.0.0:5000")
    logger.info("  POST /chat                  - Conversational loan creation")
    logger.info("  POST /voice                 - Voice transcript events")
    logger.info("  GET  /loans                 - Ledger")
    logger.info("  POST /loans/<id>/payments   - Record a payment")
    logger.info("  GET  /reports/summary       - Portfolio and interest summary")
    logger.info("  GET  /reports/reminders     - Loans due soon or overdue")
    logger.info("  GET  /health                - Health check")
    logger.info("=" * 60)

    app.run(host='0.0.0.0', port=5000, debug=True)
