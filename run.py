#!/usr/bin/env python3
"""
Development server for the POS admin.
"""
import os


def main():
    try:
        print("Starting POS admin...")

        # Honor environment variables
        debug_env = os.getenv('FLASK_DEBUG', os.getenv('DEBUG', '0')).strip().lower()
        debug_enabled = debug_env in ('1', 'true', 'yes', 'on')
        reloader_env = os.getenv('USE_RELOADER')
        use_reloader = debug_enabled if reloader_env is None else reloader_env.strip().lower() in ('1', 'true', 'yes', 'on')
        host = os.getenv('HOST', '127.0.0.1')
        port = int(os.getenv('PORT', '5000'))

        from app import create_app
        app = create_app()

        print(f"Server starting on http://{host}:{port}")
        print(f"Backend: {app.config['BACKEND_URL']}")
        print(f"Debug: {'ON' if debug_enabled else 'OFF'} | Reloader: {'ON' if use_reloader else 'OFF'}")
        print("Press Ctrl+C to stop")
        print("-" * 50)

        app.run(
            host=host,
            port=port,
            debug=debug_enabled,
            use_reloader=use_reloader
        )

    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == '__main__':
    main()
