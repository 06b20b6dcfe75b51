# Failure kinds surfaced by the generation pipeline.
# Each carries a stable code and one generic user-facing message;
# diagnostic detail goes to the logs, never to the user.


class CopilotError(Exception):
    code = "copilot_error"
    status_code = 500
    user_message = "Something went wrong."

    def __init__(self, message: str = "", *, cause: Exception | None = None):
        super().__init__(message or self.user_message)
        self.cause = cause


class TransportError(CopilotError):
    """Collaborator unreachable, rejected the call, or ran out of quota."""
    code = "transport_error"
    status_code = 502
    user_message = "The model service could not be reached. Please try again later."


class MalformedResponse(CopilotError):
    """The model answered, but not with a usable JSON document."""
    code = "malformed_response"
    status_code = 502
    user_message = "The model returned a response that could not be read."


class NoAudioData(CopilotError):
    """Speech call succeeded but carried no audio payload."""
    code = "no_audio_data"
    status_code = 502
    user_message = "The speech request succeeded but returned no audio."


class AudioDecodeError(CopilotError):
    code = "audio_decode_error"
    status_code = 502
    user_message = "The audio returned by the model could not be decoded."
