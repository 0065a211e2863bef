import logging

from .custom_logger import CustomLogger


# Wraps a stdlib logger so call sites can attach keyword metadata:
#   log.info("PDF loaded", file=name, pages=3)
# bind() returns a wrapper that adds the same metadata to every line.
class _MetadataLogger:
	def __init__(self, logger, context=None):
		self._logger = logger
		self._context = dict(context or {})

	def bind(self, **context) -> "_MetadataLogger":
		return _MetadataLogger(self._logger, {**self._context, **context})

	def _format(self, msg: str, kwargs: dict) -> str:
		meta = {**self._context, **kwargs}
		if not meta:
			return msg
		return msg + " | " + ", ".join(f"{k}={v!r}" for k, v in meta.items())

	def debug(self, msg: str, **kwargs) -> None:
		if self._logger.isEnabledFor(logging.DEBUG):
			self._logger.debug(self._format(msg, kwargs))

	def info(self, msg: str, **kwargs) -> None:
		self._logger.info(self._format(msg, kwargs))

	def warning(self, msg: str, **kwargs) -> None:
		self._logger.warning(self._format(msg, kwargs))

	def error(self, msg: str, **kwargs) -> None:
		self._logger.error(self._format(msg, kwargs))

	def exception(self, msg: str, **kwargs) -> None:
		self._logger.exception(self._format(msg, kwargs))


# Shared by the API and every analysis-core module
GLOBAL_LOGGER = _MetadataLogger(CustomLogger().get_logger("legal_analyzer"))

__all__ = ["CustomLogger", "GLOBAL_LOGGER"]
