"""Entry point: ``python main.py [host|keyboard]``"""

from pixkeep.app import main


if __name__ == "__main__":
    app = main()
    app.activate()
    app.shutdown()
