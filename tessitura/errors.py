"""Error types shared by the render engine and the generation models."""


class MissingContext (Exception):

	"""
	A required upstream element could not be resolved from the visible context.

	Renderers raise this when a lookup comes back empty or when a weighted
	choice has nothing to choose from. It is always recoverable: the engine
	either retries the renderer on a later pass or records the subtree as
	unresolved.
	"""

	def __init__ (self, reason: str) -> None:

		super().__init__(reason)
		self.reason = reason
