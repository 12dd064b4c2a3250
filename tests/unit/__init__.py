"""
Unit tests for the Hybrid Inference Layer.

Test individual components in isolation:
- Admission decisions and capability probing
- Local engine sessions and the local executor (against FakeOllama)
- Provider adapters, provider client and shared fallback client
- Response validation and error classification
- Fallback server routes (FastAPI TestClient)
"""
