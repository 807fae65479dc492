from rds_discovery.cli import run_entrypoint

if __name__ == "__main__":  # pragma: no cover
    run_entrypoint()
