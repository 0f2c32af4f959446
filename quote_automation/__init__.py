"""Quote automation backend: complexity scoring, quote pricing and lifecycle, bundle pricing."""
