"""
Collaborator stores package.

- base: structural contracts for the rule, variable, data element and
  constant stores and the localizer.
- memory: list/dict backed implementations of those contracts.
"""
