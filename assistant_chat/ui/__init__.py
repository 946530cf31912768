"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Transcript display with incremental streaming updates
    - Per-message citations and a referenced-files panel
    - Assistant file listing and upload
    - Error and set-up guidance when the assistant is unavailable

Talks to the HTTP API only; the transcript state machine lives in
assistant_chat.streaming.
"""
