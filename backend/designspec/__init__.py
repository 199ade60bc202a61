"""designspec: compile Figma design files into agent-readable artifacts.

Subpackages:
- integrations: Figma REST client, response cache, identifier parsing,
  semantic classifiers and the mode-driven entry point
- nodes: Node tree model, tree helpers, composite detection, layout inference
- spec: Formatters (design spec, tokens, content, plan) and the font catalogue
"""
