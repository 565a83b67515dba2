"""Run orchestration: ModelRunner, run_model(), run_model_async()."""
