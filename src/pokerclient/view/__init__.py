"""Table rendering: view model projection and rich output."""
