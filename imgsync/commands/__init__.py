"""Click commands for imgsync."""
