from health_exporter.cli import main

main()
