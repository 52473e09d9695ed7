"""Rule-based metadata extraction and prompt lifecycle for journal entries."""
