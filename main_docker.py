"""
Docker-specific entry point for Simulador Clínico 3280

This file imports create_app() from main.py to ensure 100% consistency.
The ONLY difference is the launch() configuration for Docker.
"""

from main import create_app, configure_logging

if __name__ == "__main__":
    configure_logging()
    app = create_app()

    # Docker configuration: Use 0.0.0.0 to be accessible from outside container
    app.launch(
        server_name="0.0.0.0",
        server_port=7860,
        share=False
    )
