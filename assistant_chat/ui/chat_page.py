"""NiceGUI chat interface with SSE streaming and citations."""

import logging
import os

from nicegui import Client, events, ui

from assistant_chat.errors import AssistantError
from assistant_chat.models.domain import ChatMessage, FileDescriptor, Message, Role
from assistant_chat.streaming.relay import relay_turn
from assistant_chat.streaming.stream import EventStream
from assistant_chat.streaming.transcript import Transcript, TranscriptState
from assistant_chat.ui.formatting import (
    format_size,
    format_time,
    markdown_to_html,
    plain_to_html,
    reference_label,
    references_to_html,
)
from assistant_chat.ui.relay_client import RelayClient

logger = logging.getLogger(__name__)

PAGE_STYLE = """
<style>
    body {
        background: #eef2f1;
        font-family: system-ui, -apple-system, "Segoe UI", Roboto, sans-serif;
    }

    .chat-card { background: #ffffff; border: 1px solid #d5dedb; border-radius: 8px; }
    .status-strip { background: #0f3d3e; color: #e6f4f1; border-radius: 8px; }

    .bubble-mine { background: #0f766e; color: #f0fdfa; border-radius: 10px 10px 2px 10px; }
    .bubble-reply {
        background: #f8fafc;
        color: #1e293b;
        border: 1px solid #e2e8f0;
        border-radius: 10px 10px 10px 2px;
    }
    .bubble-reply pre { margin: 0.4rem 0; }
    .bubble-reply code { font-family: ui-monospace, "SF Mono", Consolas, monospace; }
    .bubble-reply .md-block {
        background: #0f172a; color: #e2e8f0;
        border-radius: 6px; padding: 0.6rem 0.75rem;
        overflow-x: auto; font-size: 0.75rem;
    }
    .bubble-reply .md-code { background: #ccfbf1; color: #115e59; padding: 0 0.3rem; border-radius: 4px; }
    .bubble-reply .md-list { margin: 0.4rem 0 0.4rem 1.1rem; list-style: disc; }
    .bubble-reply .md-numbered { list-style: decimal; }
    .md-link { color: #0d9488; text-decoration: underline; }
    .ref-list { margin-top: 0.5rem; font-size: 0.75rem; border-top: 1px dashed #cbd5e1; padding-top: 0.35rem; }

    .pending-dot {
        width: 6px; height: 6px;
        border-radius: 9999px;
        background: #14b8a6;
        animation: pulse-dot 1.2s infinite ease-in-out;
    }
    .pending-dot:nth-child(2) { animation-delay: 0.15s; }
    .pending-dot:nth-child(3) { animation-delay: 0.3s; }
    @keyframes pulse-dot {
        0%, 80%, 100% { opacity: 0.25; }
        40% { opacity: 1; }
    }

    .alert-strip { background: #fff7ed; border-left: 3px solid #ea580c; color: #9a3412; }
</style>
"""


@ui.page("/")
async def chat_page(client: Client) -> None:
    """Main chat page."""
    ui.add_head_html(PAGE_STYLE)
    api = RelayClient()
    transcript = Transcript()
    files: list[FileDescriptor] = []
    active_stream: EventStream | None = None
    # Display flags, replaced by the server configuration once connected
    show_citations = True
    show_files = True

    messages_container: ui.column
    files_container: ui.column
    error_container: ui.column
    input_field: ui.input
    send_btn: ui.button
    bubbles: dict[str, ui.html] = {}
    rendered_refs: dict[str, int] = {}

    def render_message(msg: Message) -> None:
        is_user = msg.role is Role.USER
        with ui.column().classes(f"w-full gap-1 {'items-end' if is_user else 'items-start'}"):
            ui.label("You" if is_user else "Assistant").classes("text-xs text-gray-500")
            bubble = "bubble-mine" if is_user else "bubble-reply"
            with ui.element("div").classes(f"px-4 py-2 max-w-[80%] break-words {bubble}"):
                if is_user:
                    ui.html(plain_to_html(msg.content), sanitize=False).classes("text-sm")
                elif msg.content:
                    bubbles[msg.id] = ui.html(
                        markdown_to_html(msg.content), sanitize=False
                    ).classes("text-sm leading-relaxed")
                else:
                    # Open message that has not received content yet
                    with ui.row().classes("gap-1 py-1"):
                        for _ in range(3):
                            ui.element("div").classes("pending-dot")
                rendered_refs[msg.id] = len(msg.references)
                if msg.references and show_citations:
                    ui.html(references_to_html(msg.references), sanitize=False)
            ui.label(format_time(msg.timestamp)).classes("text-[10px] text-gray-400")

    def refresh_messages() -> None:
        bubbles.clear()
        rendered_refs.clear()
        messages_container.clear()
        with messages_container:
            if not transcript.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-2"):
                    ui.label("👋 Welcome to the Assistant").classes("text-xl text-gray-500")
                    ui.label("Start a conversation by typing a message below.").classes(
                        "text-gray-400"
                    )
            else:
                for msg in transcript.messages:
                    render_message(msg)

    def refresh_error() -> None:
        error_container.clear()
        if transcript.error:
            with error_container, ui.column().classes("w-full alert-strip p-4 rounded-md gap-1"):
                ui.label("Error").classes("font-semibold")
                ui.label(transcript.error)

    def refresh_files() -> None:
        if not show_files:
            return
        files_container.clear()
        with files_container:
            ui.label("Assistant Files").classes("text-sm font-semibold")
            if not files:
                ui.label("No files uploaded yet.").classes("text-xs text-gray-400")
            for f in files:
                with ui.row().classes("w-full justify-between items-center"):
                    ui.label(f.name or f.id).classes("text-xs truncate")
                    ui.label(f"{format_size(f.size_bytes)} {f.status or ''}").classes(
                        "text-[10px] text-gray-400"
                    )
            ui.separator()
            ui.label("Referenced Files").classes("text-sm font-semibold")
            if not transcript.referenced_files:
                ui.label("No references available for this conversation.").classes(
                    "text-xs text-gray-400"
                )
            for ref in transcript.referenced_files:
                with ui.column().classes("w-full gap-0"):
                    ui.label(reference_label(ref)).classes("text-xs font-medium")
                    if ref.quote:
                        ui.label(f"“{ref.quote}”").classes("text-[10px] text-gray-500 italic")

    async def load_files() -> None:
        nonlocal files
        try:
            files = await api.list_files()
        except AssistantError as e:
            logger.error(f"Error fetching files: {e}")
        refresh_files()

    def on_update(state: TranscriptState) -> None:
        open_message = state.open_message
        if (
            open_message is not None
            and open_message.id in bubbles
            and len(open_message.references) == rendered_refs.get(open_message.id)
        ):
            # Hot path while streaming: only the open bubble changes
            bubbles[open_message.id].set_content(markdown_to_html(open_message.content))
            return
        refresh_messages()
        if not transcript.is_streaming:
            refresh_error()
            refresh_files()

    def open_stream(history: list[ChatMessage]) -> EventStream:
        nonlocal active_stream
        active_stream = api.stream_chat(history)
        return active_stream

    async def send_message() -> None:
        nonlocal active_stream
        text = (input_field.value or "").strip()
        if not text or transcript.is_streaming:
            return

        input_field.value = ""
        input_field.disable()
        send_btn.disable()
        send_btn.set_text("Streaming...")
        try:
            await relay_turn(transcript, open_stream, text, on_update)
        finally:
            active_stream = None
            input_field.enable()
            send_btn.enable()
            send_btn.set_text("Send")
            refresh_error()
            refresh_files()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        content = await e.file.read()
        try:
            await api.upload_file(e.file.name, content, e.file.content_type)
        except AssistantError as err:
            ui.notify(f"Upload failed: {err}", type="negative")
            return
        ui.notify(f"Uploaded {e.file.name}", type="positive")
        await load_files()

    def new_chat() -> None:
        if transcript.is_streaming:
            return
        transcript.clear()
        refresh_messages()
        refresh_error()
        refresh_files()

    async def on_disconnect() -> None:
        if active_stream is not None:
            await active_stream.cancel()
        await api.aclose()

    client.on_disconnect(on_disconnect)

    # === UI Layout ===
    with ui.column().classes("w-full max-w-5xl mx-auto p-4 md:p-8 gap-4"):
        banner = ui.label("Connecting to Assistant...").classes("w-full status-strip p-4 text-sm font-mono")
        body = ui.row().classes("w-full gap-4 flex-nowrap")

    await client.connected()
    try:
        status = await api.check_assistant()
    except AssistantError as e:
        status = {"exists": False, "assistant_name": None, "message": str(e)}

    show_citations = status.get("show_citations", True)
    show_files = status.get("show_assistant_files", True)
    if status.get("assistant_name"):
        banner.set_text(f"Connected to Assistant: {status['assistant_name']}")

    with body:
        if not status.get("exists"):
            with ui.column().classes("alert-strip p-4 rounded-md max-w-2xl gap-2"):
                ui.label("Error").classes("font-semibold")
                ui.label(status.get("message") or "The configured assistant does not exist.")
                ui.label("To resolve this issue:").classes("font-semibold text-sm")
                ui.label("1. Create an assistant in the Pinecone console.").classes("text-sm")
                ui.label(
                    "2. Export PINECONE_ASSISTANT_NAME with the value of your assistant's name."
                ).classes("text-sm")
                ui.label("3. Restart your application.").classes("text-sm")
            return

        with ui.column().classes("flex-1 gap-2"):
            with ui.row().classes("w-full justify-end"):
                ui.button("New chat", icon="add", on_click=new_chat).props("flat dense")
            with ui.scroll_area().classes("w-full chat-card").style("height: 60vh"):
                messages_container = ui.column().classes("w-full p-4 gap-4")
                refresh_messages()
            with ui.row().classes("w-full gap-0 items-center flex-nowrap"):
                input_field = (
                    ui.input(placeholder="Type your message...")
                    .props("outlined dense")
                    .classes("flex-grow")
                    .on("keydown.enter", send_message)
                )
                send_btn = ui.button("Send", on_click=send_message).props("unelevated color=teal-8")
            error_container = ui.column().classes("w-full")

        if show_files:
            with ui.column().classes("w-80 chat-card p-4 gap-2"):
                files_container = ui.column().classes("w-full gap-1")
                ui.upload(label="Add files", on_upload=handle_upload, auto_upload=True).props(
                    "flat bordered"
                ).classes("w-full")

    if show_files:
        await load_files()


def main() -> None:
    ui.run(
        title="Assistant Chat",
        favicon="💬",
        port=int(os.getenv("UI_PORT", "8080")),
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "assistant-chat-secret"),
        reload=False,
    )


if __name__ == "__main__":
    main()
