"""
Rule Mapping Service package.

Translates persisted program rules, rule variables, enrollments and events
into the immutable models consumed by the rule evaluation engine. It provides:

- app.service: RuleEntityMapperService, the entry points used by the engine
  and the import pipeline.
- app.mapping: per-entity mappers, value type resolution and the item store.
- app.models: persisted-side inputs and engine-side outputs.
- app.stores: collaborator store contracts and in-memory implementations.

Guidelines:
- Mapping is stateless across calls; the value type cache lives for one call.
- A malformed rule or variable is dropped from its batch. Dangling data
  element references raise MissingReferenceError.
"""
