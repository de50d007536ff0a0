"""Cache simulation, blocked transposes, bit tricks, heap allocation and a job-control shell."""

__version__ = "0.1.0"
__all__ = ["allocator", "bits", "cachesim", "jobs", "shell", "transpose"]