import asyncio
import logging

from checkers_arena.core.settings import settings
from checkers_arena.engine.board import visual_board
from checkers_arena.engine.rules import legal_moves
from checkers_arena.models.enums import GameStatus
from checkers_arena.schemas import operations as ops
from checkers_arena.services.dispatcher import OperationDispatcher
from checkers_arena.services.store import MemorySnapshotStore

PLAYER = "console"


async def main():
    print("=======================================")
    print("   CHECKERS: Human (red) vs AI (black)")
    print("=======================================")

    dispatcher = OperationDispatcher(MemorySnapshotStore())
    created = await dispatcher.execute(ops.CreateGame(player_id=PLAYER, vs_ai=True, is_rated=False))
    game = created.game

    print(visual_board(game.board))

    while game.status is GameStatus.ACTIVE:

        # --- Human Turn (red) ---
        if not game.is_ai(game.current_turn):
            options = [m[:4] for m in legal_moves(game)]
            user_input = input(f"\nYour move as 'fr fc tr tc' (legal: {options}): ")
            try:
                fr, fc, tr, tc = (int(x) for x in user_input.split())
            except ValueError:
                print("Please enter four numbers.")
                continue
            result = await dispatcher.execute(ops.MakeMove(
                game_id=game.id, player_id=PLAYER, from_row=fr, from_col=fc, to_row=tr, to_col=tc,
            ))

        # --- AI Turn (black) ---
        else:
            result = await dispatcher.execute(ops.RequestAiMove(game_id=game.id))
            if result.type == "ai_move_made" and result.move is not None:
                m = result.move
                print(f"\nAI plays ({m.from_row}, {m.from_col}) -> ({m.to_row}, {m.to_col})")

        if isinstance(result, ops.ErrorResult):
            print(f"Rejected: {result.code} {result.message}")
            continue

        game = result.game
        print("\n" + visual_board(game.board))

    # --- End Game ---
    winner = game.winner_id()
    if winner is None:
        print("\nGame Over! It's a Draw.")
    else:
        print(f"\nGame Over! Winner: {'Human' if winner == PLAYER else 'AI'}")


if __name__ == "__main__":
    logging.basicConfig(level=settings.logging.level)
    asyncio.run(main())
