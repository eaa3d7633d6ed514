"""
Services Layer

Pure business logic services that:
- Accept domain inputs (IDs, sessions, plain values)
- Return domain outputs (dataclasses, dicts)
- Do NOT depend on HTTP request/response objects
- Do NOT commit unless they own the whole operation (schedule generation,
  match import, result recording)
"""
