"""
Services Layer

Pure decision logic that:
- Accepts domain inputs (court views, blocks, waitlist entries, an explicit now)
- Returns freshly computed values
- Does NOT read clocks, environment or any shared state
- Does NOT mutate its inputs
"""
