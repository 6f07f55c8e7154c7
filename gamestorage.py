"""Production entrypoint for the game storage server.

    python3 gamestorage.py --init        # write data/config/server_config.yml
    python3 gamestorage.py               # serve on 0.0.0.0:3400
    python3 gamestorage.py --clean       # delete every document
"""
import sys

from gamestorage_lib.main import Config, clean_documents, create_app
from gamestorage_lib.setup import (
    get_config_path,
    get_loaded_config,
    get_parser,
    parse_args,
    render_template,
    setup,
)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    args = parse_args(argv)
    if args.help:
        get_parser().print_help()
        return 0
    if args.print_template:
        sys.stdout.write(render_template())
        return 0

    config_path = get_config_path(args.config)
    rc = setup(argv, config_path)
    if rc != 0:
        return rc
    config = Config.from_server_config(get_loaded_config() or {})

    if args.clean:
        return clean_documents(config, assume_yes=args.yes)

    import uvicorn
    app = create_app(config, config_path=config_path)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
