"""Home, help, and about routes."""

from xitzin import Request, Xitzin

from ..engine.state import MAX_DEATHS, MAX_SCORE


def register_routes(app: Xitzin) -> None:
    """Register home routes."""

    @app.gemini("/", name="home")
    def home(request: Request):
        return app.template("home.gmi", max_score=MAX_SCORE)

    @app.gemini("/help", name="help")
    def help_page(request: Request):
        # Verbs and abbreviations come from the loaded vocabulary
        vocabulary = request.app.state.world.vocabulary
        abbreviations = sorted(vocabulary.abbreviations.items())
        return app.template(
            "help.gmi",
            verbs=sorted(vocabulary.syntax),
            abbreviations=abbreviations,
            max_deaths=MAX_DEATHS,
        )

    @app.gemini("/about", name="about")
    def about(request: Request):
        world = request.app.state.world
        return app.template(
            "about.gmi",
            rooms=len(world.rooms),
            objects=len(world.objects),
        )
