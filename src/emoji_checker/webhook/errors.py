from ..exceptions import RelayError


class WebhookError(RelayError):
    status_code = 500
    public_message = "internal server error"


class AuthError(WebhookError):
    public_message = "verify error"


class WebhookHeaderError(AuthError):
    pass


class WebhookTimestampError(AuthError):
    pass


class WebhookSignatureError(AuthError):
    status_code = 400


class ParseError(WebhookError):
    pass


class DispatchError(WebhookError):
    pass
