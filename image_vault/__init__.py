"""Image Vault service: image uploads backed by an object store and a metadata database."""
