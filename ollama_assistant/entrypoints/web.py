# entrypoints/web.py
import argparse
import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, session as flask_session
from flask_socketio import SocketIO, emit, join_room

from ollama_assistant.application.commands.registry import SIGIL
from ollama_assistant.core.domain.errors import FormatError, InferenceError
from ollama_assistant.infrastructure.di.container import Container, create_container

logger = logging.getLogger(__name__)


def serialize_history(conversation_uc):
    return [turn.to_dict() for turn in conversation_uc.get_history()]


class WebApp:
    """JSON/Socket.IO shell around chat sessions; one conversation per panel."""

    def __init__(self, container: Optional[Container] = None):
        self.app = Flask(__name__)
        self.app.config['SECRET_KEY'] = os.urandom(24)

        self.socketio = SocketIO(self.app, cors_allowed_origins="*", manage_session=False)

        self.container = container or create_container()
        self.session_manager = self.container.session_manager()
        self.inference_client = self.container.inference_client()

        self._register_routes()
        self._register_socket_events()

    def _lookup(self, session_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not session_id:
            return None
        return self.session_manager.get_session(session_id)

    def _register_routes(self):
        """Register all HTTP routes."""

        @self.app.route('/api/health-check', methods=['GET'])
        def health_check():
            return jsonify({"status": "ok"})

        @self.app.route('/api/models', methods=['GET'])
        def list_models():
            try:
                models = self.inference_client.list_models()
            except InferenceError as e:
                self.app.logger.error(f"Error fetching models: {e}")
                return jsonify({'error': f'Error fetching models: {e}'}), 502

            return jsonify({'models': [
                {'name': m.name, 'size': m.size, 'modified_at': m.modified_at} for m in models
            ]})

        @self.app.route('/api/sessions', methods=['POST'])
        def create_session():
            """Start a chat session, optionally restoring a saved {history, model} state."""
            data = request.get_json(silent=True) or {}
            if not isinstance(data, dict):
                return jsonify({'error': 'Request body must be a JSON object'}), 400

            conversation_uc = self.container.conversation_uc()
            try:
                conversation_uc.restore_state(data.get('state'))
            except FormatError as e:
                self.app.logger.warning(f"Rejected session state: {e}")
                return jsonify({'error': str(e)}), 400

            session_id = self.session_manager.create_session(conversation_uc)
            flask_session['chat_session_id'] = session_id

            return jsonify({'session_id': session_id, 'model': conversation_uc.model})

        @self.app.route('/api/sessions/<session_id>', methods=['DELETE'])
        def delete_session(session_id):
            self.session_manager.delete_session(session_id)
            return jsonify({'success': True})

        @self.app.route('/api/history', methods=['GET'])
        def get_history():
            session_data = self._lookup(get_session_id_from_request())
            if not session_data:
                return jsonify({'error': 'Invalid session'}), 404

            conversation_uc = session_data['conversation_uc']
            return jsonify({
                'model': conversation_uc.model,
                'history': serialize_history(conversation_uc)
            })

    def _register_socket_events(self):
        """Register the panel protocol: send, change model, clear, save and restore state."""

        @self.socketio.on('join_session')
        def handle_join_session(data):
            session_id = (data or {}).get('session_id')
            if not self._lookup(session_id):
                emit('session_joined', {'status': 'error', 'message': 'Invalid session'})
                return

            join_room(session_id)
            emit('session_joined', {'status': 'success'})

        @self.socketio.on('send_message')
        def handle_send_message(data):
            data = data or {}
            text = (data.get('text') or '').strip()
            session_data = self._lookup(data.get('session_id'))

            if not session_data:
                emit('error', {'text': 'Error: Invalid session'})
                return
            if not text:
                emit('error', {'text': 'Error: Empty message'})
                return

            conversation_uc = session_data['conversation_uc']
            with session_data['dispatch_lock']:
                if text.startswith(SIGIL):
                    response = conversation_uc.run_command(text)
                else:
                    emit('thinking', {'text': 'Thinking...'})
                    try:
                        response = conversation_uc.handle_message(text)
                    except InferenceError as e:
                        self.app.logger.error(f"Error generating response: {e}")
                        emit('error', {'text': f'Error: {e}'})
                        return

                emit('response', {'text': response, 'history': serialize_history(conversation_uc)})

        @self.socketio.on('change_model')
        def handle_change_model(data):
            data = data or {}
            session_data = self._lookup(data.get('session_id'))
            model = data.get('model')
            if not session_data or not model:
                emit('error', {'text': 'Error: Invalid request parameters'})
                return

            with session_data['dispatch_lock']:
                session_data['conversation_uc'].set_model(model)
            emit('model_changed', {'model': model})

        @self.socketio.on('clear_history')
        def handle_clear_history(data):
            session_id = (data or {}).get('session_id')
            session_data = self._lookup(session_id)
            if not session_data:
                emit('error', {'text': 'Error: Invalid session'})
                return

            with session_data['dispatch_lock']:
                session_data['conversation_uc'].clear_history()
            self.session_manager.set_session_data(session_id, 'saved_state', None)
            emit('history_cleared', {})

        @self.socketio.on('save_state')
        def handle_save_state(data):
            data = data or {}
            if not self.session_manager.set_session_data(data.get('session_id'), 'saved_state', data.get('state')):
                emit('error', {'text': 'Error: Invalid session'})

        @self.socketio.on('panel_visible')
        def handle_panel_visible(data):
            session_data = self._lookup((data or {}).get('session_id'))
            if not session_data:
                emit('error', {'text': 'Error: Invalid session'})
                return

            saved = session_data.get('saved_state')
            if not isinstance(saved, dict):
                saved = {}
            conversation_uc = session_data['conversation_uc']
            emit('panel_state', {
                'history': saved.get('history') or serialize_history(conversation_uc),
                'model': saved.get('model') or conversation_uc.model
            })

    def run(self, debug=False, host='127.0.0.1', port=5000):
        logger.info("Starting server on %s:%s", host, port)
        self.socketio.run(self.app, debug=debug, host=host, port=port, allow_unsafe_werkzeug=True)


def get_session_id_from_request():
    """Extract session ID from request - either from Flask session or X-Session-Id header"""
    session_id = flask_session.get('chat_session_id')

    if not session_id and 'X-Session-Id' in request.headers:
        session_id = request.headers.get('X-Session-Id')
        if session_id:
            flask_session['chat_session_id'] = session_id

    return session_id


def create_app(container: Optional[Container] = None):
    """Factory function to create and initialize the application."""
    web_app = WebApp(container)
    return web_app.app, web_app.socketio, web_app


def main():
    parser = argparse.ArgumentParser(description='Serve chat sessions over HTTP and Socket.IO')
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, default=5000)
    parser.add_argument('--debug', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)
    _, _, web_app = create_app()
    web_app.run(debug=args.debug, host=args.host, port=args.port)


if __name__ == '__main__':
    main()
