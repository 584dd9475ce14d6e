"""Cross-cutting helpers (timing/diagnostics)."""
