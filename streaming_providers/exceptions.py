class ProviderException(Exception):
    def __init__(self, message, reason="api_error"):
        self.message = message
        self.reason = reason
        super().__init__(self.message)


class UnsupportedProviderError(ProviderException):
    def __init__(self, provider):
        self.provider = provider
        super().__init__(
            f"Unsupported debrid provider: {provider}", "unsupported_provider"
        )


class MetadataError(Exception):
    def __init__(self, message, content_id=None):
        self.message = message
        self.content_id = content_id
        super().__init__(self.message)
