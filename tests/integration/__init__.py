"""
Integration tests for the Hybrid Inference Layer.

Test components together:
- Full routing flows through HybridProcessor with every outbound call
  answered in process (fallback server via ASGI)
- Live local Ollama server (marked with @pytest.mark.integration)
"""
