"""Body pattern analysis API."""
