"""
Rendering pipeline pieces.

Modules:
- delimiters: Delimiter sets and their registry
- resolution: Extension, engine and delimiter precedence
- layouts: Layout chain composition with cycle detection
- context: Render context layering and partial merging
- helpers: Sync helpers and two-phase async helpers
- engines: Engine registry and the built-in engines
- template_functions: Default helpers (``markdown``)

"""
