# core/errors.py

class TutorError(Exception):
	"""
	Base class for every failure the gateway reports to the caller.

	Each subclass carries a stable `code` the UI maps to a friendly message,
	and the HTTP status the route answers with.
	"""
	code: str = "internal_error"
	status_code: int = 500

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message

	def to_payload(self) -> dict:
		return {"error": self.message, "code": self.code}

class InvalidRequest(TutorError):
	"""Neither a prompt nor an image was supplied, or the form was malformed."""
	code = "invalid_request"
	status_code = 400

class ConfigurationError(TutorError):
	"""The credential pool is missing or empty. Retrying will not help."""
	code = "configuration_error"
	status_code = 500

class PoolExhausted(TutorError):
	"""Every credential was marked failed while serving the current request."""
	code = "pool_exhausted"
	status_code = 503

class UpstreamError(TutorError):
	"""The provider call failed and no (further) failover applies."""
	code = "upstream_error"
	status_code = 500

	def __init__(self, message: str, retryable: bool = False):
		super().__init__(message)
		self.retryable = retryable

	def to_payload(self) -> dict:
		payload = super().to_payload()
		payload["retryable"] = self.retryable
		return payload
