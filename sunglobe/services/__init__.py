"""Qt-free engine services: solar model, scheduling, camera and viewport."""
