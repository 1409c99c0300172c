from app.worker.control_loop import FAILURE_POLICIES, run_control_loop

__all__ = ["FAILURE_POLICIES", "run_control_loop"]
