"""Source front ends that produce resolved class metadata."""
