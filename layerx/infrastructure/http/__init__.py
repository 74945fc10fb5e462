"""HTTP transport and multipart payload construction."""
