"""HTTP trigger for the weekly digest."""
