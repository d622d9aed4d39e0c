"""
Simulation page UI components and event handlers
"""
import logging

import gradio as gr

from .config import (
    CLINICAL_TOPICS, CASE_DURATION_SECONDS, MIN_ORDERS_LENGTH, DEFAULT_MODEL,
    REPORT_EXPORT_FAILED_MESSAGE
)
from .views import (
    ORDERS_PLACEHOLDER, render_timer, render_header, render_error,
    render_case_markdown, render_feedback
)
from .workflow import AppState, SimulationController

logger = logging.getLogger(__name__)

PAGE_FOR_STATE = {
    AppState.IDLE: "welcome_page",
    AppState.REGISTRATION: "registration_page",
    AppState.LOADING_CASE: "loading_page",
    AppState.ACTIVE_CASE: "active_page",
    AppState.EVALUATING: "evaluating_page",
    AppState.FEEDBACK: "feedback_page"
}

STATUS_FOR_STATE = {
    AppState.ACTIVE_CASE: "Caso en curso",
    AppState.EVALUATING: "Evaluación",
    AppState.FEEDBACK: "Evaluación"
}


def create_simulation_ui():
    """Create every page of the simulator; only one is visible at a time."""

    header = gr.Markdown("")
    error_md = gr.Markdown("", elem_classes="error-box")

    # === WELCOME ===
    with gr.Column(visible=True, elem_classes="welcome") as welcome_page:
        gr.Markdown("## Bienvenido al Simulador", elem_classes="title")
        gr.Markdown(
            "Pon a prueba tus conocimientos clínicos bajo los lineamientos de la "
            "**Resolución 3280 de 2018**.",
            elem_classes="title"
        )
        with gr.Row():
            gr.Markdown(f"⏱️ **{CASE_DURATION_SECONDS // 60} Minutos**\n\nTiempo límite por caso.", elem_classes="info-card")
            gr.Markdown("📋 **Temas Clave**\n\nMaterno Perinatal, Ca Cuello Uterino, Parto...", elem_classes="info-card")
            gr.Markdown("📄 **Reporte PDF**\n\nDescarga tu informe al finalizar.", elem_classes="info-card")
        start_btn = gr.Button("Iniciar Sesión", size="lg", variant="primary")

    # === REGISTRATION ===
    with gr.Column(visible=False) as registration_page:
        gr.Markdown("## Registro de Estudiante")
        with gr.Row():
            name_box = gr.Textbox(label="Nombre Completo", placeholder="Ej: Pepito Pérez")
            id_box = gr.Textbox(label="Número de Cédula", placeholder="Ej: 123456789")
        topic_dd = gr.Dropdown(
            choices=CLINICAL_TOPICS,
            value=CLINICAL_TOPICS[0],
            label="Seleccione el Tema del Caso Clínico",
            info="Basado en las Rutas Integrales de Atención en Salud (RIAS) - Resolución 3280 de 2018."
        )
        with gr.Row():
            cancel_btn = gr.Button("Cancelar", variant="secondary")
            register_btn = gr.Button("Comenzar Evaluación", variant="primary")

    # === LOADING ===
    with gr.Column(visible=False) as loading_page:
        gr.Markdown("### 🔄 Generando paciente...", elem_classes="title")
        gr.Markdown("*Consultando guías RIAS para el tema seleccionado...*", elem_classes="title")

    # === ACTIVE CASE ===
    with gr.Column(visible=False) as active_page:
        timer_display = gr.HTML(render_timer(CASE_DURATION_SECONDS))
        case_md = gr.Markdown("")
        gr.Markdown("### 📝 Órdenes Médicas y Conducta")
        gr.Markdown(
            "**Instrucciones:** Estructure su respuesta de forma ordenada. Asegúrese de cubrir "
            "diagnóstico, paraclínicos, tratamiento, educación y signos de alarma.",
            elem_classes="instructions"
        )
        orders_box = gr.Textbox(
            label="Órdenes",
            placeholder=ORDERS_PLACEHOLDER,
            lines=16,
            elem_classes="orders-box"
        )
        submit_btn = gr.Button("Finalizar y Evaluar", variant="primary", interactive=False)

    # === EVALUATING ===
    with gr.Column(visible=False) as evaluating_page:
        gr.Markdown("### 🧑‍⚕️ El docente está revisando tu respuesta...", elem_classes="title")
        gr.Markdown("*Validando criterios Resolución 3280...*", elem_classes="title")

    # === FEEDBACK ===
    with gr.Column(visible=False) as feedback_page:
        feedback_html = gr.HTML("")
        with gr.Row():
            download_btn = gr.DownloadButton("📄 Descargar Informe PDF", variant="secondary")
            restart_btn = gr.Button("Iniciar Nuevo Caso Clínico", variant="primary")

    ticker = gr.Timer(1.0, active=False)
    countdown_token = gr.State(None)

    return {
        "header": header,
        "error_md": error_md,
        "welcome_page": welcome_page,
        "start_btn": start_btn,
        "registration_page": registration_page,
        "name_box": name_box,
        "id_box": id_box,
        "topic_dd": topic_dd,
        "cancel_btn": cancel_btn,
        "register_btn": register_btn,
        "loading_page": loading_page,
        "active_page": active_page,
        "timer_display": timer_display,
        "case_md": case_md,
        "orders_box": orders_box,
        "submit_btn": submit_btn,
        "evaluating_page": evaluating_page,
        "feedback_page": feedback_page,
        "feedback_html": feedback_html,
        "download_btn": download_btn,
        "restart_btn": restart_btn,
        "ticker": ticker,
        "countdown_token": countdown_token
    }


def setup_simulation_events(components, controller_state, model: str = DEFAULT_MODEL):
    """Wire every button and the countdown to the session controller."""
    c = components
    pages = [c[name] for name in PAGE_FOR_STATE.values()]
    outputs = [controller_state, c["header"], c["error_md"], *pages,
               c["name_box"], c["id_box"], c["timer_display"], c["case_md"],
               c["orders_box"], c["submit_btn"], c["feedback_html"],
               c["download_btn"], c["ticker"], c["countdown_token"]]

    def ensure(ctrl):
        return ctrl if ctrl is not None else SimulationController(model=model)

    def render(ctrl, reset_orders=False, prefill=False):
        s = ctrl.session
        visible_page = PAGE_FOR_STATE[s.state]
        updates = {
            controller_state: ctrl,
            c["header"]: render_header(s.student, STATUS_FOR_STATE.get(s.state, "")),
            c["error_md"]: render_error(s.error),
            c["timer_display"]: render_timer(s.remaining),
            c["submit_btn"]: gr.update(
                interactive=len(s.orders) >= MIN_ORDERS_LENGTH or s.remaining <= 0
            ),
            c["ticker"]: gr.Timer(active=(s.state == AppState.ACTIVE_CASE and s.timer_running)),
            c["countdown_token"]: ctrl.countdown_id
        }
        for name in PAGE_FOR_STATE.values():
            updates[c[name]] = gr.update(visible=(name == visible_page))

        updates[c["case_md"]] = render_case_markdown(s.case) if s.case else ""
        updates[c["orders_box"]] = gr.update(value=s.orders) if reset_orders else gr.update()
        updates[c["feedback_html"]] = render_feedback(s.evaluation) if s.evaluation else ""
        updates[c["download_btn"]] = gr.update() if s.state == AppState.FEEDBACK else gr.update(value=None)

        if prefill and s.student:
            updates[c["name_box"]] = s.student.name
            updates[c["id_box"]] = s.student.id_number
        else:
            updates[c["name_box"]] = gr.update()
            updates[c["id_box"]] = gr.update()
        return updates

    def run_evaluation(ctrl):
        """Yield the evaluating page, then the result."""
        yield render(ctrl)
        ctrl.evaluate()
        yield render(ctrl)

    # --- HANDLERS ---
    def handle_enter_registration(ctrl):
        ctrl = ensure(ctrl)
        ctrl.enter_registration()
        return render(ctrl)

    def handle_cancel(ctrl):
        ctrl = ensure(ctrl)
        ctrl.cancel()
        return render(ctrl)

    def handle_register(ctrl, name, id_number, topic):
        ctrl = ensure(ctrl)
        if not ctrl.register(name, id_number, topic):
            yield render(ctrl)
            return
        yield render(ctrl)
        ctrl.load_case()
        yield render(ctrl, reset_orders=True)

    def handle_orders_change(ctrl, orders):
        ctrl = ensure(ctrl)
        ctrl.set_orders(orders)
        s = ctrl.session
        return ctrl, gr.update(interactive=len(s.orders) >= MIN_ORDERS_LENGTH or s.remaining <= 0)

    def handle_submit(ctrl, orders):
        ctrl = ensure(ctrl)
        ctrl.set_orders(orders)
        if not ctrl.submit_manual():
            yield render(ctrl)
            return
        yield from run_evaluation(ctrl)

    def handle_tick(ctrl, orders, token):
        ctrl = ensure(ctrl)
        if ctrl.state != AppState.ACTIVE_CASE or token is None:
            yield render(ctrl)
            return
        ctrl.set_orders(orders)
        ctrl.tick(token)
        if ctrl.state == AppState.EVALUATING:
            yield from run_evaluation(ctrl)
            return
        yield {controller_state: ctrl, c["timer_display"]: render_timer(ctrl.session.remaining)}

    def handle_restart(ctrl):
        ctrl = ensure(ctrl)
        ctrl.restart()
        return render(ctrl, prefill=True)

    def handle_download(ctrl):
        ctrl = ensure(ctrl)
        try:
            path = ctrl.export_report()
        except OSError:
            logger.exception("Could not write the PDF report")
            return gr.update(), render_error(REPORT_EXPORT_FAILED_MESSAGE)
        return path, render_error(ctrl.session.error)

    # --- EVENTS ---
    c["start_btn"].click(handle_enter_registration, inputs=controller_state, outputs=outputs)
    c["cancel_btn"].click(handle_cancel, inputs=controller_state, outputs=outputs)
    c["register_btn"].click(
        handle_register,
        inputs=[controller_state, c["name_box"], c["id_box"], c["topic_dd"]],
        outputs=outputs
    )
    c["orders_box"].change(
        handle_orders_change,
        inputs=[controller_state, c["orders_box"]],
        outputs=[controller_state, c["submit_btn"]],
        show_progress="hidden"
    )
    c["submit_btn"].click(
        handle_submit,
        inputs=[controller_state, c["orders_box"]],
        outputs=outputs
    )
    c["ticker"].tick(
        handle_tick,
        inputs=[controller_state, c["orders_box"], c["countdown_token"]],
        outputs=outputs,
        show_progress="hidden"
    )
    c["restart_btn"].click(handle_restart, inputs=controller_state, outputs=outputs)
    c["download_btn"].click(
        handle_download,
        inputs=controller_state,
        outputs=[c["download_btn"], c["error_md"]]
    )
