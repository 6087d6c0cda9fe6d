"""HTTP API LabelSheet."""
