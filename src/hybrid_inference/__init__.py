"""
Hybrid Inference Layer for Inbox Triage.

Routes short-text AI requests to the best available execution path:
- On-device engine (local inference server, no data leaves the host)
- User-supplied provider credential (Gemini, OpenAI, Anthropic)
- Shared cloud fallback endpoint

Outputs from every path are validated into a single result shape and every
failure is classified into a small set of actionable error kinds.

Architecture: admission control + provider adapters + structured-output validation
"""

__version__ = "0.1.0"
