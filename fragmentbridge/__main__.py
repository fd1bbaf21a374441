import sys
import traceback


def cli(args):
    """
    Command line interface for fragmentbridge.

    Args:
        args (list): list of CLI arguments to parse.

    Returns:
        int: process exit code.
    """
    import argparse
    import json
    import webbrowser

    from rich.console import Console
    from rich.markup import escape

    from .config import load_config
    from .utils import BindError

    console = Console( stderr = True, soft_wrap = True )

    parser = argparse.ArgumentParser( prog = 'fragmentbridge' )
    parser.add_argument( 'action',
                         type = str,
                         help = 'action, currently supported "version", "login" (run an implicit-grant login through the loopback bridge), "bridge-page" (print the bridge page HTML)' )

    # Hack around a bit so that we can pass the help
    # to the proper sub-command line.
    rootArgs = args[ 1: 2 ]

    # Everything after the command name and the action name that is passed
    # to the action argument parser.
    actionArgs = args[ 2: ]
    args = parser.parse_args( rootArgs )

    if args.action.lower() == 'version':
        from . import __version__
        print( "fragmentbridge version %s" % ( __version__, ) )
    elif args.action.lower() == 'bridge-page':
        from .pages import render_bridge_page
        parser = argparse.ArgumentParser( prog = 'fragmentbridge bridge-page' )
        parser.add_argument( '--locale',
                             type = str,
                             default = None,
                             help = 'page locale ("en" or "vi")' )
        page_args = parser.parse_args( actionArgs )
        config = load_config().with_overrides( locale = page_args.locale )
        print( render_bridge_page( config.locale ) )
    elif args.action.lower() == 'login':
        from .credential import CredentialError, build_authorization_url, parse_credential
        from .relay import TOKEN_RECEIVED_EVENT
        from .session import start_session

        parser = argparse.ArgumentParser( prog = 'fragmentbridge login' )
        parser.add_argument( '--authorize-url',
                             type = str,
                             required = True,
                             help = 'provider authorization endpoint' )
        parser.add_argument( '--client-id',
                             type = str,
                             required = True,
                             help = 'OAuth client ID registered with the provider' )
        parser.add_argument( '--scope',
                             type = str,
                             action = 'append',
                             default = [],
                             help = 'scope to request, can be repeated' )
        parser.add_argument( '--no-browser',
                             action = 'store_true',
                             help = 'print URL instead of opening browser' )
        parser.add_argument( '--timeout',
                             type = float,
                             default = None,
                             help = 'seconds to wait for the browser before giving up' )
        parser.add_argument( '--port',
                             type = int,
                             default = None,
                             help = 'preferred loopback port (default: 3000)' )
        parser.add_argument( '--locale',
                             type = str,
                             default = None,
                             help = 'locale of the pages shown in the browser' )
        parser.add_argument( '--raw',
                             action = 'store_true',
                             help = 'print the raw fragment instead of parsed JSON' )
        login_args = parser.parse_args( actionArgs )

        config = load_config().with_overrides( timeout = login_args.timeout,
                                               port = login_args.port,
                                               locale = login_args.locale )

        try:
            controller, info = start_session( config = config )
        except BindError as e:
            console.print( "[bold red]Could not start the loopback listener:[/bold red] %s" % ( escape( str( e ) ), ) )
            return 1

        try:
            console.print( "Loopback listener started on port %s" % ( info.port, ) )
            auth_url = build_authorization_url( login_args.authorize_url,
                                                login_args.client_id,
                                                info,
                                                scopes = login_args.scope )
            if login_args.no_browser:
                console.print( "\nPlease visit this URL to authenticate:\n%s\n" % ( escape( auth_url ), ) )
            else:
                console.print( "Opening browser for authentication..." )
                if not webbrowser.open( auth_url ):
                    console.print( "\nCould not open browser. Please visit this URL:\n%s\n" % ( escape( auth_url ), ) )

            console.print( "Waiting for authentication..." )
            # The session publishes an abort message on timeout, the extra
            # delay only covers the last poll of the accept loop.
            message = controller.relay.receive( timeout = config.timeout + 5 )
        finally:
            controller.stop()

        if message is None or message.event != TOKEN_RECEIVED_EVENT:
            reason = message.payload if message is not None else 'Authentication timeout'
            console.print( "[bold red]Authentication failed:[/bold red] %s" % ( escape( reason ), ) )
            return 1

        if login_args.raw:
            print( message.payload )
            return 0

        try:
            credential = parse_credential( message.payload )
        except CredentialError as e:
            console.print( "[bold red]Authentication failed:[/bold red] %s" % ( escape( str( e ) ), ) )
            return 1
        console.print( "[bold green]Authentication successful.[/bold green]" )
        print( json.dumps( credential, indent = 2 ) )
    else:
        raise Exception( 'invalid action: %s' % (args.action.lower()) )
    return 0

def main():
    args = sys.argv

    # Hack since we don't have access to parsed args here and parsing itself may fail
    debug_mode = False
    if "--debug" in args:
        debug_mode = True
        args.remove("--debug")
        from .utils import set_default_print_debug_fn
        set_default_print_debug_fn(lambda x: print(x, file=sys.stderr))

    try:
        return cli(args)
    except Exception as e:
        print("Error:", e,file=sys.stderr)

        if debug_mode:
            print(traceback.format_exc(), file=sys.stderr)

        return 1

if __name__ == "__main__":
    sys.exit(main())
