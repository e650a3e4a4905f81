"""
Program rule models package.

- persisted: the read-only program rule, variable, enrollment and event
  records supplied by the collaborator stores.
- engine: the frozen variant types handed to the rule evaluation engine.

The two sides are deliberately separate; only the mapping package converts
between them.
"""
