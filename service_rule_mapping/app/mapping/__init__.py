"""
Program rule mapping package.

Each mapper converts one kind of persisted record into its engine model:

- value_types: value type cache, semantic typing and default values.
- variables / actions / rules: rule definitions to engine variants.
- runtime: enrollments and events to engine runtime values.
- item_store: descriptions for variables, constants and environment
  variables.

Rules and variables that cannot be mapped are reported as skipped
MappingResults and filtered out of batches.
"""
