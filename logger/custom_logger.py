import logging
import os
from typing import Optional


class CustomLogger:
	"""Configurable logger helper shared by the API and the analysis core.

	Usage:
		logger = CustomLogger().get_logger("legal_analyzer.api")
		logger.info("hello")

	The level defaults to ``LOG_LEVEL`` from the environment (INFO if unset).
	"""

	def __init__(self, level: Optional[int] = None):
		if level is None:
			level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
			if not isinstance(level, int):
				level = logging.INFO
		self.level = level

	def _configure_handler(self, handler: logging.Handler) -> None:
		fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
		handler.setFormatter(fmt)
		handler.setLevel(self.level)

	def get_logger(self, name: str, level: Optional[int] = None) -> logging.Logger:
		"""Return a logger configured with a stream handler.

		A handler is only attached once per logger name so repeated imports
		do not duplicate output.
		"""
		logger = logging.getLogger(name)
		logger.setLevel(level if level is not None else self.level)

		if not logger.handlers:
			handler = logging.StreamHandler()
			self._configure_handler(handler)
			logger.addHandler(handler)

		return logger
