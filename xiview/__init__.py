"""Demo viewer rendering shaped sample text and relaying to an editing engine."""
