"""
Main application file for Simulador Clínico 3280
Run this file to start the application: python main.py
"""
import os
import logging

import gradio as gr
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from simulador.config import APP_TITLE, DEFAULT_MODEL
from simulador.ui_simulation import create_simulation_ui, setup_simulation_events

logger = logging.getLogger(__name__)

CSS = """
    .title {text-align: center; margin: 20px 0;}
    .welcome {max-width: 720px; margin: 0 auto;}
    .info-card {padding: 16px; background: #f8fafc; border: 1px solid #e2e8f0; border-radius: 10px;}
    .error-box {color: #b91c1c;}
    .instructions {padding: 12px; background: #eff6ff; border-radius: 8px;}
    .orders-box textarea {font-family: monospace !important;}
    .timer {position: fixed; top: 16px; right: 16px; z-index: 50; padding: 8px 16px;
            border-radius: 9999px; font-family: monospace; font-size: 1.25rem; font-weight: bold;
            background: #ffffff; color: #0369a1; border: 2px solid #0ea5e9;}
    .timer.urgent {background: #fee2e2; color: #dc2626; border-color: #ef4444;}
    .score-card {padding: 24px; border-radius: 12px; border: 2px solid; text-align: center;}
    .score-card.good {color: #16a34a; background: #f0fdf4; border-color: #bbf7d0;}
    .score-card.middling {color: #ca8a04; background: #fefce8; border-color: #fef08a;}
    .score-card.poor {color: #dc2626; background: #fef2f2; border-color: #fecaca;}
    .score-value {font-size: 3.5rem; font-weight: 900; margin: 8px 0;}
    .feedback-grid {display: grid; grid-template-columns: 1fr 1fr; gap: 16px; margin-top: 16px;}
    .feedback-box {padding: 16px; border-radius: 12px; border: 1px solid #e2e8f0; margin-top: 16px;}
    .feedback-box.positive h3 {color: #15803d;}
    .feedback-box.improve h3 {color: #ea580c;}
    .feedback-box.recommendations {background: #eff6ff;}
    .feedback-box ul {list-style: none; padding-left: 0;}
"""


def configure_logging():
    """Stream logs, plus a file under LOG_DIR when it is set."""
    handlers = [logging.StreamHandler()]
    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, "app.log")))
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def create_app(model: str = DEFAULT_MODEL):
    """Create the complete Gradio application."""

    with gr.Blocks(theme=gr.themes.Soft(), title=APP_TITLE, css=CSS) as app:
        gr.Markdown(f"# 🏥 {APP_TITLE}")
        gr.Markdown("Atención Primaria en Salud • Colombia")

        # Per-browser session controller, created on first interaction
        controller_state = gr.State(None)

        components = create_simulation_ui()
        setup_simulation_events(components, controller_state, model=model)

    return app


if __name__ == "__main__":
    configure_logging()
    logger.info("Starting %s with model %s", APP_TITLE, DEFAULT_MODEL)
    app = create_app()

    # Local development: Use 127.0.0.1 and auto-open browser
    app.launch(
        server_name=os.getenv("SERVER_NAME", "127.0.0.1"),
        server_port=int(os.getenv("SERVER_PORT", "7860")),
        inbrowser=True
    )
