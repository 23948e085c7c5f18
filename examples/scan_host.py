# Example script demonstrating how to use the Docker layer usage tool
from docker_layer_usage.core import ScanConfig, scan_host
from docker_layer_usage.report import render_text

def main():
    # Example parameters
    config = ScanConfig(
        docker_root="/mnt/evidence/disk001/var/lib/docker",  # Docker root of a mounted disk
        driver="overlay2",
        offline=True,  # No docker daemon for a mounted disk
    )

    # Measure every container and list orphaned diff folders
    report = scan_host(config)
    print(render_text(report))

if __name__ == "__main__":
    main()
